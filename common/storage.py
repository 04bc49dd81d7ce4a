"""Key/value storage backends for per-visitor state.

Values are stored as strings, mirroring browser local storage. The session
backend persists through Django's session framework so state survives reloads;
the memory backend is used by scripts and tests.
"""

from typing import Optional


class KeyValueStorage:
    """Minimal string key/value interface."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    def __init__(self, initial: Optional[dict] = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())


class SessionStorage(KeyValueStorage):
    """Storage bound to a Django session (``request.session``).

    Last writer wins: concurrent requests on the same session may overwrite
    each other.
    """

    def __init__(self, session):
        self.session = session

    def get(self, key: str) -> Optional[str]:
        return self.session.get(key)

    def set(self, key: str, value: str) -> None:
        self.session[key] = value
        self.session.modified = True

    def remove(self, key: str) -> None:
        if key in self.session:
            del self.session[key]
            self.session.modified = True
