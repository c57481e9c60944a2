"""Room domain services: registry, membership, bracket engine and coordinator.

This package contains pure domain logic that is driven by the socket
handlers, keeping transport concerns separated from the game rules.
"""
from .bracket import Bracket, build_matches
from .coordinator import SessionCoordinator
from .membership import Room
from .registry import RoomRegistry, generate_room_code

__all__ = [
    'Bracket',
    'build_matches',
    'Room',
    'RoomRegistry',
    'SessionCoordinator',
    'generate_room_code',
]
