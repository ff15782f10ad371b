from __future__ import annotations

from typing import Callable, List

PopListener = Callable[[], None]


class History:
    """Where the current address lives and how a new entry is pushed."""

    def __init__(self) -> None:
        self._pop_listeners: List[PopListener] = []

    @property
    def location(self) -> str:
        raise NotImplementedError

    def push(self, address: str) -> None:
        raise NotImplementedError

    def on_pop(self, listener: PopListener) -> Callable[[], None]:
        self._pop_listeners.append(listener)
        return lambda: self._pop_listeners.remove(listener)

    def _fire_pop(self) -> None:
        for listener in list(self._pop_listeners):
            listener()


class MemoryHistory(History):
    """Back/forward stack held in memory, like a browser tab's session history."""

    def __init__(self, initial: str = "") -> None:
        super().__init__()
        self.entries: List[str] = [initial]
        self.index = 0

    @property
    def location(self) -> str:
        return self.entries[self.index]

    def push(self, address: str) -> None:
        del self.entries[self.index + 1:]
        self.entries.append(address)
        self.index += 1

    def back(self) -> bool:
        if self.index == 0:
            return False
        self.index -= 1
        self._fire_pop()
        return True

    def forward(self) -> bool:
        if self.index >= len(self.entries) - 1:
            return False
        self.index += 1
        self._fire_pop()
        return True

    def replace_location(self, address: str) -> None:
        # manual edit of the address bar followed by enter
        self.entries[self.index] = address
        self._fire_pop()


class RedirectHistory(History):
    """History for one HTTP request.

    The request URL is the current location. A push becomes the redirect the
    handler answers with, and the browser records it as a new entry.
    """

    def __init__(self, location: str, base_path: str = "/") -> None:
        super().__init__()
        self._location = location
        self.base_path = base_path
        self.pushed: List[str] = []

    @property
    def location(self) -> str:
        return self._location

    def push(self, address: str) -> None:
        self._location = address
        self.pushed.append(address)

    @property
    def redirect_target(self) -> str:
        return self.base_path + self._location
