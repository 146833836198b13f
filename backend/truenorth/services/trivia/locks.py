import threading
from contextlib import contextmanager
from typing import Dict, List


class KeyedLocks:
    """In-process mutual exclusion per key (device, session or day bucket).

    Entries are reference counted and dropped when the last holder leaves,
    so the registry only grows with the number of keys in use right now.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, List] = {}

    @contextmanager
    def hold(self, key: str):
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1
        entry[0].acquire()
        try:
            yield
        finally:
            entry[0].release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._locks.pop(key, None)

    def __len__(self):
        with self._guard:
            return len(self._locks)
