"""Room storage.

``RoomStore`` is the capability the service depends on: keyed get/put/delete of
Room snapshots plus a per-room writer lock. Swapping the in-memory map for a
remote cache means implementing these five methods; transition logic does not
change.
"""
from __future__ import annotations

from contextlib import contextmanager
from threading import RLock
from typing import Iterator

from .models import Room


class RoomStore:
    def get(self, code: str) -> Room | None:
        raise NotImplementedError

    def put(self, code: str, room: Room) -> None:
        raise NotImplementedError

    def delete(self, code: str) -> bool:
        raise NotImplementedError

    def codes(self) -> list[str]:
        raise NotImplementedError

    def lock(self, code: str):
        """Context manager serializing read-modify-write cycles on one room.

        Mutations of different rooms never wait on each other.
        """
        raise NotImplementedError


class MemoryRoomStore(RoomStore):
    """Process-local store.

    Rooms are kept as plain dicts, the same shape a remote cache would hold, so
    callers never share mutable state with the store.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._rooms: dict[str, dict] = {}
        self._room_locks: dict[str, RLock] = {}

    def get(self, code: str) -> Room | None:
        with self._lock:
            data = self._rooms.get(code)
        if data is None:
            return None
        return Room.from_dict(data)

    def put(self, code: str, room: Room) -> None:
        data = room.to_dict()
        with self._lock:
            self._rooms[code] = data

    def delete(self, code: str) -> bool:
        with self._lock:
            self._room_locks.pop(code, None)
            if code in self._rooms:
                del self._rooms[code]
                return True
            return False

    def codes(self) -> list[str]:
        with self._lock:
            return list(self._rooms.keys())

    @contextmanager
    def lock(self, code: str) -> Iterator[None]:
        with self._lock:
            room_lock = self._room_locks.get(code)
            if room_lock is None:
                room_lock = RLock()
                self._room_locks[code] = room_lock
        with room_lock:
            yield
