"""Session context: the observable "who is logged in" shared by every view."""

from __future__ import annotations

import inspect
import logging
from enum import Enum
from typing import Awaitable, Callable

from employee_manager.models.auth import Identity
from employee_manager.services.identity_service import IdentityService

logger = logging.getLogger(__name__)

SessionListener = Callable[[Identity | None], Awaitable[None] | None]


class SessionState(str, Enum):
    UNKNOWN = "unknown"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


async def notify_listeners(listeners: list, value: object) -> None:
    """Call each listener in subscription order, awaiting coroutine listeners."""
    for listener in list(listeners):
        result = listener(value)
        if inspect.isawaitable(result):
            await result


class SessionContext:
    """Holds zero or one authenticated identity.

    Starts ``UNKNOWN`` and leaves that state once :meth:`initialize` has
    resolved the current identity, so views must not assume one at mount time.
    ``logout`` always clears the local identity, even when the provider call fails.
    """

    def __init__(self, identity_service: IdentityService, refresh_token: str | None = None) -> None:
        self.identity_service = identity_service
        self._refresh_token = refresh_token
        self._identity: Identity | None = None
        self._state = SessionState.UNKNOWN
        self._listeners: list[SessionListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_user(self) -> Identity | None:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def initialize(self) -> None:
        if self._state is not SessionState.UNKNOWN:
            return

        identity: Identity | None = None
        if self._refresh_token:
            try:
                identity = await self.identity_service.refresh(self._refresh_token)
            except Exception:
                logger.warning("Could not restore session — continuing anonymous", exc_info=True)
        await self._set_identity(identity)

    async def login(self, email: str, password: str) -> Identity:
        identity = await self.identity_service.sign_in(email, password)
        await self._set_identity(identity)
        return identity

    async def register(self, email: str, password: str) -> Identity:
        identity = await self.identity_service.sign_up(email, password)
        await self._set_identity(identity)
        return identity

    async def logout(self) -> None:
        previous = self._identity
        try:
            await self.identity_service.sign_out(previous)
        except Exception:
            logger.exception("Failed to log out: clearing local session anyway")
        finally:
            self._refresh_token = None
            await self._set_identity(None)

    async def _set_identity(self, identity: Identity | None) -> None:
        self._identity = identity
        self._state = SessionState.AUTHENTICATED if identity else SessionState.ANONYMOUS
        await notify_listeners(self._listeners, identity)
