from __future__ import annotations

import logging
from enum import Enum

from employee_manager.core.session import SessionContext

logger = logging.getLogger(__name__)


class AuthMode(str, Enum):
    LOGIN = "login"
    REGISTER = "register"


class AuthViewController:
    """Login / register form shown while the session is anonymous."""

    def __init__(self, session: SessionContext) -> None:
        self.session = session
        self.mode = AuthMode.LOGIN
        self.email = ""
        self.password = ""
        self.confirm_password = ""
        self.error = ""
        self.loading = False

    def toggle_mode(self) -> None:
        self.mode = AuthMode.REGISTER if self.mode is AuthMode.LOGIN else AuthMode.LOGIN
        self.error = ""
        self.password = ""
        self.confirm_password = ""

    async def submit(self) -> bool:
        self.error = ""
        if self.mode is AuthMode.REGISTER and self.password != self.confirm_password:
            self.error = "Passwords do not match"
            return False

        self.loading = True
        try:
            if self.mode is AuthMode.LOGIN:
                await self.session.login(self.email, self.password)
            else:
                await self.session.register(self.email, self.password)
        except Exception as err:
            action = "log in" if self.mode is AuthMode.LOGIN else "create an account"
            logger.warning("Failed to %s as %s: %s", action, self.email, err)
            self.error = f"Failed to {action}: {err}"
            return False
        finally:
            self.loading = False
        return True
