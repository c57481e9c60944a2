"""Session coordinator: maps inbound messages onto rooms and brackets.

Each handler runs to completion under the room's lock and returns the
outbound directives for the transport to carry out. Rejected events yield
no directives at all; the one exception is joining a room that does not
exist, which is answered with ``errorMsg``.
"""
import logging
from typing import Callable, Dict, List

from votebracket.exceptions import RoomNotFound, VoteBracketException
from votebracket.messages import (
    Ack, Broadcast, CastVote, CheckRoom, CreateRoom, Direct, Disconnect, InstantWin,
    JoinRoom, Reply, ResetGame, StartGame, Subscribe, Unsubscribe, UpdateName,
)
from .membership import Room
from .registry import RoomRegistry

logger = logging.getLogger(__name__)

DEFAULT_ROOM_NOT_FOUND_MESSAGE = 'Room not found!'


class SessionCoordinator:
    def __init__(self, registry: RoomRegistry, room_not_found_message: str = DEFAULT_ROOM_NOT_FOUND_MESSAGE):
        self.registry = registry
        self.room_not_found_message = room_not_found_message
        self._handlers: Dict[type, Callable] = {
            CreateRoom: self._create_room,
            CheckRoom: self._check_room,
            JoinRoom: self._join_room,
            UpdateName: self._update_name,
            StartGame: self._start_game,
            CastVote: self._vote,
            InstantWin: self._instant_win,
            ResetGame: self._reset_game,
            Disconnect: self._disconnect,
        }

    def handle(self, connection_id: str, message) -> List:
        handler = self._handlers.get(type(message))
        if handler is None:
            raise TypeError(f"unhandled message type {type(message).__name__}")
        try:
            return handler(connection_id, message)
        except VoteBracketException as exc:
            logger.info("discarded %s from %s: %s", type(message).__name__, connection_id, exc)
            return []

    def _current_room(self, connection_id: str) -> Room:
        room = self.registry.room_of(connection_id)
        if room is None:
            raise RoomNotFound(self.registry.room_code_of(connection_id))
        return room

    def _leave_current(self, connection_id: str, unsubscribe: bool = True) -> List:
        code = self.registry.unbind(connection_id)
        if code is None:
            return []
        room = self.registry.get_room(code)
        if room is None:
            return []

        out: List = [Unsubscribe(code)] if unsubscribe else []
        with room.lock:
            promoted = room.leave(connection_id)
            if room.is_empty:
                self.registry.delete_room_if_empty(code)
                return out
            if promoted is not None:
                out.append(Direct('youAreAdmin', None, promoted.connection_id))
            out.append(Broadcast('updateLobby', room.lobby(), code))
        return out

    # ---- handlers ----

    def _create_room(self, connection_id: str, message: CreateRoom) -> List:
        out = self._leave_current(connection_id)
        room = self.registry.create_room(connection_id, message.name)
        with room.lock:
            lobby = room.lobby()
        return out + [
            Subscribe(room.code),
            Reply('roomCreated', {'code': room.code, 'isAdmin': True, 'name': message.name}),
            Broadcast('updateLobby', lobby, room.code),
        ]

    def _check_room(self, connection_id: str, message: CheckRoom) -> List:
        return [Ack(self.registry.exists(message.code))]

    def _join_room(self, connection_id: str, message: JoinRoom) -> List:
        room = self.registry.get_room(message.code)
        if room is None:
            return [Reply('errorMsg', self.room_not_found_message)]

        if self.registry.room_code_of(connection_id) == room.code:
            with room.lock:
                participant = room.find(connection_id)
                if participant is not None:
                    return [Reply('joinedSuccess', {
                        'code': room.code,
                        'isAdmin': participant.is_admin,
                        'gameState': room.bracket.to_dict(),
                    })]

        out = self._leave_current(connection_id)
        with room.lock:
            try:
                room.join(connection_id, message.name)
            except RoomNotFound:
                return out + [Reply('errorMsg', self.room_not_found_message)]
            self.registry.bind(connection_id, room.code)
            state = room.bracket.to_dict()
            lobby = room.lobby()
        return out + [
            Subscribe(room.code),
            Reply('joinedSuccess', {'code': room.code, 'isAdmin': False, 'gameState': state}),
            Broadcast('updateLobby', lobby, room.code),
        ]

    def _update_name(self, connection_id: str, message: UpdateName) -> List:
        room = self._current_room(connection_id)
        with room.lock:
            if not room.rename(connection_id, message.name):
                return []
            lobby = room.lobby()
        return [Broadcast('updateLobby', lobby, room.code)]

    def _start_game(self, connection_id: str, message: StartGame) -> List:
        room = self._current_room(connection_id)
        with room.lock:
            room.start_game(connection_id, message.participants, message.matches, message.admin_participates)
            state = room.bracket.to_dict()
        return [Broadcast('gameStarted', state, room.code)]

    def _vote(self, connection_id: str, message: CastVote) -> List:
        room = self._current_room(connection_id)
        with room.lock:
            winner = room.vote(connection_id, message.match_id, message.slot)
            state = room.bracket.to_dict()
        if winner is not None:
            logger.info("room %s: match %r resolved for slot %d", room.code, message.match_id, winner)
        return [Broadcast('updateState', state, room.code)]

    def _instant_win(self, connection_id: str, message: InstantWin) -> List:
        room = self._current_room(connection_id)
        with room.lock:
            room.force_win(connection_id, message.match_id, message.slot)
            state = room.bracket.to_dict()
        return [Broadcast('updateState', state, room.code)]

    def _reset_game(self, connection_id: str, message: ResetGame) -> List:
        room = self._current_room(connection_id)
        with room.lock:
            room.reset_game(connection_id)
            lobby = room.lobby()
        return [Broadcast('returnToLobby', lobby, room.code)]

    def _disconnect(self, connection_id: str, message: Disconnect) -> List:
        # The transport drops the connection's groups itself.
        return self._leave_current(connection_id, unsubscribe=False)
