import logging
import random
import threading
from typing import Callable, Dict, List, Optional

from votebracket.exceptions import RoomCodeUnavailable
from .membership import Room

logger = logging.getLogger(__name__)


def generate_room_code(length: int = 4) -> str:
    """Generate a short numeric room code without a leading zero."""
    return str(random.randint(10 ** (length - 1), 10 ** length - 1))


class RoomRegistry:
    """In-memory map of room code -> Room, plus connection -> room code.

    Owned by the application (see ``create_app``); rooms live only as long
    as the process. The registry lock is never held while taking a room
    lock.
    """

    def __init__(self, code_generator: Optional[Callable[[], str]] = None,
                 code_length: int = 4, max_attempts: int = 100):
        self._rooms: Dict[str, Room] = {}
        self._connections: Dict[str, str] = {}
        self._lock = threading.RLock()
        self._generate = code_generator or (lambda: generate_room_code(code_length))
        self._max_attempts = max_attempts

    def create_room(self, connection_id: str, display_name: str) -> Room:
        with self._lock:
            for _ in range(self._max_attempts):
                code = self._generate()
                if code not in self._rooms:
                    break
                logger.warning("room code collision on %s, regenerating", code)
            else:
                raise RoomCodeUnavailable(f"no free room code after {self._max_attempts} attempts")
            room = Room(code, connection_id, display_name)
            self._rooms[code] = room
            self._connections[connection_id] = code
        logger.info("created room %s for %s", code, connection_id)
        return room

    def get_room(self, code: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(code)

    def exists(self, code: str) -> bool:
        with self._lock:
            return code in self._rooms

    def codes(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    def delete_room_if_empty(self, code: str) -> bool:
        with self._lock:
            room = self._rooms.get(code)
            if room is None or not room.is_empty:
                return False
            del self._rooms[code]
            room.closed = True
        logger.info("deleted empty room %s", code)
        return True

    # ---- connection -> room bookkeeping ----

    def bind(self, connection_id: str, code: str) -> None:
        with self._lock:
            self._connections[connection_id] = code

    def unbind(self, connection_id: str) -> Optional[str]:
        """Forget the connection's room; returns the code it was bound to."""
        with self._lock:
            return self._connections.pop(connection_id, None)

    def room_code_of(self, connection_id: str) -> Optional[str]:
        with self._lock:
            return self._connections.get(connection_id)

    def room_of(self, connection_id: str) -> Optional[Room]:
        with self._lock:
            code = self._connections.get(connection_id)
            return self._rooms.get(code) if code is not None else None

    def __len__(self):
        with self._lock:
            return len(self._rooms)
