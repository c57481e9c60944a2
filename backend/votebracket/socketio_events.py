from flask import current_app, request
from flask_socketio import emit, join_room, leave_room
from typing import Any, List, Optional

from votebracket import socketio
from votebracket.exceptions import InvalidPayload
from votebracket.messages import (
    Ack, Broadcast, CastVote, Direct, Reply, Subscribe, Unsubscribe, parse_event,
)


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _coordinator():
    return current_app.extensions['votebracket']


def _deliver(directives: List[Any]) -> Optional[Any]:
    """Carry out the coordinator's directives; returns the ack value, if any."""
    namespace = request.namespace  # type: ignore
    ack = None
    for d in directives:
        if isinstance(d, Subscribe):
            join_room(d.room)
        elif isinstance(d, Unsubscribe):
            leave_room(d.room)
        elif isinstance(d, Reply):
            if d.payload is None:
                emit(d.event)
            else:
                emit(d.event, d.payload)
        elif isinstance(d, Broadcast):
            socketio.emit(d.event, d.payload, to=d.room, namespace=namespace)
        elif isinstance(d, Direct):
            if d.payload is None:
                socketio.emit(d.event, to=d.connection_id, namespace=namespace)
            else:
                socketio.emit(d.event, d.payload, to=d.connection_id, namespace=namespace)
        elif isinstance(d, Ack):
            ack = d.value
        else:
            raise TypeError(f"unknown directive {d!r}")
    return ack


def _dispatch(event: str, data: Any = None) -> Optional[Any]:
    sid = _get_sid()
    try:
        message = parse_event(event, data)
    except InvalidPayload as exc:
        current_app.logger.info(f"[payload-rejected] sid={sid} event={event} {exc}")
        return None
    coordinator = _coordinator()
    code_before = coordinator.registry.room_code_of(sid)
    directives = coordinator.handle(sid, message)
    current_app.logger.debug(f"[event] sid={sid} event={event} directives={len(directives)}")
    _log_outcome(sid, message, directives, code_before, coordinator.registry)
    return _deliver(directives)


def _log_outcome(sid: str, message: Any, directives: List[Any], code_before: Optional[str], registry) -> None:
    logger = current_app.logger
    for d in directives:
        if isinstance(d, Reply) and d.event == 'roomCreated':
            logger.info(f"[room-created] sid={sid} code={d.payload['code']}")
        elif isinstance(d, Direct) and d.event == 'youAreAdmin':
            logger.info(f"[admin-promoted] sid={d.connection_id} left_by={sid}")
    if isinstance(message, CastVote):
        if directives:
            logger.info(f"[vote] sid={sid} match={message.match_id!r} slot={message.slot!r}")
        else:
            logger.info(f"[vote-rejected] sid={sid} match={message.match_id!r} slot={message.slot!r}")
    if code_before is not None and not registry.exists(code_before):
        logger.info(f"[room-deleted] code={code_before} last_sid={sid}")


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    current_app.logger.info(f"[disconnect] sid={_get_sid()} reason={reason}")
    _dispatch('disconnect')


def handle_create_room(data=None):
    _dispatch('createRoom', data)


def handle_check_room(code=None):
    return _dispatch('checkRoom', code)


def handle_join_room(data=None):
    _dispatch('joinRoom', data)


def handle_update_name(data=None):
    _dispatch('updateName', data)


def handle_start_game(data=None):
    _dispatch('startGame', data)


def handle_vote(data=None):
    _dispatch('vote', data)


def handle_instant_win(data=None):
    _dispatch('instantWin', data)


def handle_reset_game(data=None):
    _dispatch('resetGame', data)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``.

    Event names match what the browser client emits.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('createRoom', handle_create_room, namespace=namespace)
    socketio.on_event('checkRoom', handle_check_room, namespace=namespace)
    socketio.on_event('joinRoom', handle_join_room, namespace=namespace)
    socketio.on_event('updateName', handle_update_name, namespace=namespace)
    socketio.on_event('startGame', handle_start_game, namespace=namespace)
    socketio.on_event('vote', handle_vote, namespace=namespace)
    socketio.on_event('instantWin', handle_instant_win, namespace=namespace)
    socketio.on_event('resetGame', handle_reset_game, namespace=namespace)
