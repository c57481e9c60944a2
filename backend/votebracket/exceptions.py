"""Domain exceptions.

The core raises these; the session coordinator catches them at the event
boundary and decides whether the sender hears about it (almost never).
"""


class VoteBracketException(Exception):
    """Base class for every rejected room or bracket operation."""
    pass


# ---- Room ----

class RoomNotFound(VoteBracketException):
    def __init__(self, code):
        self.code = code
        super().__init__(f"Room {code} not found")


class RoomCodeUnavailable(VoteBracketException):
    """The code generator could not find a free code."""
    pass


class NotAuthorized(VoteBracketException):
    """A non-admin connection attempted an admin-only action."""
    def __init__(self, connection_id, action):
        self.connection_id = connection_id
        self.action = action
        super().__init__(f"{connection_id} is not allowed to {action}")


# ---- Bracket ----

class InvalidVote(VoteBracketException):
    def __init__(self, reason):
        self.reason = reason
        super().__init__(f"Vote rejected: {reason}")


class MatchNotFound(VoteBracketException):
    def __init__(self, match_id):
        self.match_id = match_id
        super().__init__(f"Match {match_id!r} not found")


class MalformedBracket(VoteBracketException):
    """Match definitions are not a valid elimination bracket."""
    pass


# ---- Transport ----

class InvalidPayload(VoteBracketException):
    """An inbound event payload is missing fields or has the wrong shape."""
    pass
