"""Typed messages exchanged between the transport and the session coordinator.

Inbound messages are built from raw Socket.IO payloads by ``parse_event``.
Outbound directives are what the coordinator asks the transport to do.
"""
from dataclasses import dataclass
from typing import Any, List, Optional

from votebracket.exceptions import InvalidPayload


# ---- Inbound ----

@dataclass(frozen=True)
class CreateRoom:
    name: str


@dataclass(frozen=True)
class CheckRoom:
    code: str


@dataclass(frozen=True)
class JoinRoom:
    code: str
    name: str


@dataclass(frozen=True)
class UpdateName:
    name: str


@dataclass(frozen=True)
class StartGame:
    participants: List[Any]
    matches: List[Any]
    admin_participates: bool


@dataclass(frozen=True)
class CastVote:
    match_id: Any
    slot: Any


@dataclass(frozen=True)
class InstantWin:
    match_id: Any
    slot: Any


@dataclass(frozen=True)
class ResetGame:
    pass


@dataclass(frozen=True)
class Disconnect:
    pass


# ---- Outbound ----

@dataclass(frozen=True)
class Reply:
    """Send to the connection that raised the event."""
    event: str
    payload: Any = None


@dataclass(frozen=True)
class Broadcast:
    """Send to every connection subscribed to ``room``."""
    event: str
    payload: Any
    room: str


@dataclass(frozen=True)
class Direct:
    """Send to one specific connection."""
    event: str
    payload: Any
    connection_id: str


@dataclass(frozen=True)
class Ack:
    """Value returned to the sender's acknowledgement callback."""
    value: Any


@dataclass(frozen=True)
class Subscribe:
    room: str


@dataclass(frozen=True)
class Unsubscribe:
    room: str


def _field(data, key, kinds, default=None, required=False):
    if not isinstance(data, dict):
        raise InvalidPayload(f"expected an object, got {type(data).__name__}")
    value = data.get(key, default)
    if value is None:
        if required:
            raise InvalidPayload(f"'{key}' is required")
        return default
    if not isinstance(value, kinds):
        raise InvalidPayload(f"'{key}' has the wrong type ({type(value).__name__})")
    return value


def _name(value) -> str:
    if value is None:
        return ''
    if not isinstance(value, str):
        raise InvalidPayload(f"name must be a string, got {type(value).__name__}")
    return value


def _code(value) -> str:
    if value is None:
        return ''
    if not isinstance(value, (str, int)) or isinstance(value, bool):
        raise InvalidPayload(f"room code must be a string, got {type(value).__name__}")
    return str(value).strip()


def parse_event(event: str, data: Optional[Any] = None):
    """Turn a raw transport event into an inbound message."""
    if event == 'createRoom':
        # Old clients send the bare name, newer ones {'name': ...}
        if isinstance(data, dict):
            return CreateRoom(_name(data.get('name')))
        return CreateRoom(_name(data))
    if event == 'checkRoom':
        return CheckRoom(_code(data))
    if event == 'joinRoom':
        return JoinRoom(_code(_field(data, 'code', (str, int))), _name(_field(data, 'name', str)))
    if event == 'updateName':
        return UpdateName(_field(data, 'name', str, required=True))
    if event == 'startGame':
        return StartGame(
            list(_field(data, 'participants', list, default=[])),
            _field(data, 'matches', list, required=True),
            bool(_field(data, 'adminParticipates', (bool, int), default=False)),
        )
    if event == 'vote':
        return CastVote(_field(data, 'matchId', (str, int), required=True), _field(data, 'playerNum', int, required=True))
    if event == 'instantWin':
        return InstantWin(_field(data, 'matchId', (str, int), required=True), _field(data, 'playerNum', int, required=True))
    if event == 'resetGame':
        return ResetGame()
    if event == 'disconnect':
        return Disconnect()
    raise InvalidPayload(f"unknown event {event!r}")
