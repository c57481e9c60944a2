"""Room membership: participants, the admin role and its hand-over."""
import logging
import threading
from typing import List, Optional

from votebracket.exceptions import NotAuthorized, RoomNotFound
from votebracket.models import Participant
from .bracket import Bracket

logger = logging.getLogger(__name__)


class Room:
    """One game session.

    While the room has participants exactly one of them is admin and
    ``admin_id`` is that participant's connection id. Callers hold
    ``lock`` around every mutation.
    """

    def __init__(self, code: str, creator_id: str, creator_name: str):
        self.code = code
        self.participants: List[Participant] = [Participant(creator_id, creator_name, is_admin=True)]
        self.admin_id: Optional[str] = creator_id
        self.bracket = Bracket()
        self.lock = threading.RLock()
        # Set by the registry on deletion; a closed room accepts no one.
        self.closed = False

    @property
    def is_empty(self) -> bool:
        return not self.participants

    def find(self, connection_id: str) -> Optional[Participant]:
        for participant in self.participants:
            if participant.connection_id == connection_id:
                return participant
        return None

    def is_admin(self, connection_id: str) -> bool:
        return connection_id is not None and connection_id == self.admin_id

    def require_admin(self, connection_id: str, action: str) -> None:
        if not self.is_admin(connection_id):
            raise NotAuthorized(connection_id, action)

    def join(self, connection_id: str, name: str) -> Participant:
        if self.closed:
            raise RoomNotFound(self.code)
        participant = Participant(connection_id, name)
        self.participants.append(participant)
        return participant

    def rename(self, connection_id: str, name: str) -> bool:
        participant = self.find(connection_id)
        if participant is None:
            return False
        participant.name = name
        return True

    def leave(self, connection_id: str) -> Optional[Participant]:
        """Remove a participant; return whoever was promoted to admin, if anyone.

        Leaving twice is a no-op. When the admin leaves, the earliest-joined
        remaining participant takes over.
        """
        participant = self.find(connection_id)
        if participant is None:
            return None
        self.participants.remove(participant)

        if connection_id != self.admin_id:
            return None
        if self.is_empty:
            self.admin_id = None
            return None
        successor = self.participants[0]
        successor.is_admin = True
        self.admin_id = successor.connection_id
        logger.info("room %s: admin %s left, %s promoted", self.code, connection_id, successor.connection_id)
        return successor

    def start_game(self, connection_id: str, participants, matches, admin_participates: bool) -> None:
        self.require_admin(connection_id, 'start the game')
        self.bracket.start(len(self.participants), participants, matches, admin_participates)

    def force_win(self, connection_id: str, match_id, slot) -> None:
        self.require_admin(connection_id, 'force a winner')
        self.bracket.force_win(match_id, slot)

    def reset_game(self, connection_id: str) -> None:
        self.require_admin(connection_id, 'reset the game')
        self.bracket.reset()

    def vote(self, connection_id: str, match_id, slot) -> Optional[int]:
        return self.bracket.vote(connection_id, match_id, slot, is_admin=self.is_admin(connection_id))

    def lobby(self):
        return [p.to_dict() for p in self.participants]

    def __repr__(self):
        return f"<Room {self.code} {len(self.participants)} participants admin={self.admin_id}>"
