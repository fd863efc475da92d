"""Navigation shell: picks the mounted view from the session and the URL fragment."""

from __future__ import annotations

import logging
from typing import Callable

from employee_manager.core.session import SessionContext, SessionState
from employee_manager.models.auth import Identity
from employee_manager.services.employee_store import EmployeeStore
from employee_manager.ui.auth_view import AuthViewController
from employee_manager.ui.employee_detail import EmployeeDetailController
from employee_manager.ui.employee_list import EmployeeListController
from employee_manager.ui.location import HashLocation
from employee_manager.ui.notifications import Notifier
from employee_manager.ui.router import Route, ViewName, resolve_route

logger = logging.getLogger(__name__)

View = AuthViewController | EmployeeListController | EmployeeDetailController


class NavigationShell:
    def __init__(
        self,
        session: SessionContext,
        location: HashLocation,
        store: EmployeeStore,
        notifier: Notifier | None = None,
    ) -> None:
        self.session = session
        self.location = location
        self.store = store
        self.notifier = notifier or Notifier()

        self.route: Route | None = None
        self.view: View | None = None
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def welcome_text(self) -> str:
        user = self.session.current_user
        if user is None:
            return ""
        return f"Welcome, {user.email or user.display_name or user.uid}"

    async def start(self) -> None:
        self._unsubscribers = [
            self.session.subscribe(self._on_session_change),
            self.location.subscribe(self._on_location_change),
        ]
        await self.session.initialize()
        await self.render()

    def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._unmount()
        self.route = None

    async def render(self) -> None:
        route = self._current_route()
        if route is not None and route == self.route:
            return

        self._unmount()
        self.route = route
        if route is None:
            return

        logger.debug("Mounting %s view", route.view.value)
        if route.view is ViewName.AUTH:
            self.view = AuthViewController(self.session)
        elif route.view is ViewName.DETAIL:
            controller = EmployeeDetailController(
                self.store,
                self.notifier,
                self.location,
                route.params["employee_id"],
            )
            self.view = controller
            await controller.mount()
        else:
            list_controller = EmployeeListController(self.store, self.notifier, self.location)
            self.view = list_controller
            await list_controller.mount()

    async def logout(self) -> None:
        await self.session.logout()

    def _current_route(self) -> Route | None:
        state = self.session.state
        if state is SessionState.UNKNOWN:
            return None
        if state is SessionState.ANONYMOUS:
            return Route(view=ViewName.AUTH)
        return resolve_route(self.location.fragment)

    def _unmount(self) -> None:
        if isinstance(self.view, (EmployeeListController, EmployeeDetailController)):
            self.view.unmount()
        self.view = None

    async def _on_session_change(self, identity: Identity | None) -> None:
        await self.render()

    async def _on_location_change(self, fragment: str) -> None:
        await self.render()
