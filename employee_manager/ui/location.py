from __future__ import annotations

from typing import Awaitable, Callable

from employee_manager.core.session import notify_listeners

LocationListener = Callable[[str], Awaitable[None] | None]


class HashLocation:
    """The current URL fragment plus change notification (``hashchange``)."""

    def __init__(self, fragment: str = "") -> None:
        self._fragment = fragment
        self._listeners: list[LocationListener] = []

    @property
    def fragment(self) -> str:
        return self._fragment

    def subscribe(self, listener: LocationListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: LocationListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def navigate(self, fragment: str) -> None:
        if fragment == self._fragment:
            return
        self._fragment = fragment
        await notify_listeners(self._listeners, fragment)
