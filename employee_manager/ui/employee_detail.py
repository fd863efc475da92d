"""Employee detail view: two tabs of fields, each field editable on its own."""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from employee_manager.core.errors import ConflictError, ValidationError
from employee_manager.models.employee import Employee, EmployeeUpdate
from employee_manager.services.employee_store import EmployeeStore
from employee_manager.ui.employee_list import DUPLICATE_EMAIL_MESSAGE
from employee_manager.ui.location import HashLocation
from employee_manager.ui.notifications import Notifier
from employee_manager.ui.router import LIST_FRAGMENT

logger = logging.getLogger(__name__)


class DetailTab(str, Enum):
    GENERAL = "general"
    PERSONAL = "personal"


TAB_FIELDS: dict[DetailTab, tuple[str, ...]] = {
    DetailTab.GENERAL: ("name", "email", "position", "department", "salary", "hire_date"),
    DetailTab.PERSONAL: ("address", "dob", "skill", "nationality"),
}

EDITABLE_FIELDS: tuple[str, ...] = TAB_FIELDS[DetailTab.GENERAL] + TAB_FIELDS[DetailTab.PERSONAL]


class EmployeeDetailDraft(BaseModel):
    name: str = ""
    email: str = ""
    position: str = ""
    department: str = ""
    salary: str = ""
    hire_date: str = ""
    address: str = ""
    dob: str = ""
    skill: str = ""
    nationality: str = ""

    @classmethod
    def from_employee(cls, employee: Employee) -> EmployeeDetailDraft:
        salary = employee.salary
        return cls(
            name=employee.name,
            email=employee.email,
            position=employee.position,
            department=employee.department,
            salary=str(int(salary)) if float(salary).is_integer() else str(salary),
            hire_date=employee.hire_date,
            address=employee.address or "",
            dob=employee.dob or "",
            skill=employee.skill or "",
            nationality=employee.nationality or "",
        )


def build_update(draft: EmployeeDetailDraft) -> EmployeeUpdate:
    """Every field of the draft, so a save overwrites the whole record."""
    errors = {
        field: "This field is required"
        for field in TAB_FIELDS[DetailTab.GENERAL]
        if not getattr(draft, field).strip()
    }
    if errors:
        raise ValidationError(errors)

    try:
        return EmployeeUpdate(
            name=draft.name.strip(),
            email=draft.email.strip(),
            position=draft.position.strip(),
            department=draft.department.strip(),
            salary=draft.salary.strip(),
            hire_date=draft.hire_date.strip(),
            address=draft.address,
            dob=draft.dob.strip(),
            skill=draft.skill,
            nationality=draft.nationality,
        )
    except PydanticValidationError as err:
        raise ValidationError(
            {str(item["loc"][0]) if item["loc"] else "form": item["msg"] for item in err.errors()}
        ) from err


class EmployeeDetailController:
    def __init__(
        self,
        store: EmployeeStore,
        notifier: Notifier,
        location: HashLocation,
        employee_id: str,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.location = location
        self.employee_id = employee_id

        self.employee: Employee | None = None
        self.draft = EmployeeDetailDraft()
        self.loading = True
        self.error = ""
        self.form_errors: dict[str, str] = {}
        self.saving = False
        self.mounted = False

        self.active_tab = DetailTab.GENERAL
        self.editable: dict[str, bool] = dict.fromkeys(EDITABLE_FIELDS, False)

    @property
    def visible_fields(self) -> tuple[str, ...]:
        return TAB_FIELDS[self.active_tab]

    @property
    def initials(self) -> str:
        parts = [part for part in self.draft.name.split(" ") if part]
        return "".join(part[0] for part in parts)[:2].upper() or "E"

    async def mount(self) -> None:
        self.mounted = True
        self.loading = True
        try:
            employee = await self.store.fetch_by_id(self.employee_id)
        except Exception as err:
            logger.exception("Failed to load employee %s", self.employee_id)
            if self.mounted:
                self.error = f"Failed to load employee: {err}"
                self.loading = False
            return

        if not self.mounted:
            return
        if employee is None:
            self.error = "Employee not found"
            self.loading = False
            return

        self.employee = employee
        self.draft = EmployeeDetailDraft.from_employee(employee)
        self.loading = False

    def unmount(self) -> None:
        self.mounted = False

    def select_tab(self, tab: DetailTab | str) -> None:
        self.active_tab = DetailTab(tab)

    def enable_field(self, field: str) -> None:
        if field not in self.editable:
            raise KeyError(field)
        self.editable[field] = True

    def set_field(self, field: str, value: str) -> None:
        if field not in self.editable:
            raise KeyError(field)
        self.draft = self.draft.model_copy(update={field: value})
        self.form_errors.pop(field, None)

    async def save(self) -> bool:
        if self.employee is None:
            return False

        try:
            update = build_update(self.draft)
        except ValidationError as err:
            self.form_errors = err.errors
            return False

        self.form_errors = {}
        self.saving = True
        try:
            await self.store.patch(self.employee_id, update)
        except ConflictError:
            self.notifier.error(DUPLICATE_EMAIL_MESSAGE)
            return False
        except Exception as err:
            logger.exception("Failed to save employee %s", self.employee_id)
            self.notifier.error(f"Failed to save: {err}")
            return False
        finally:
            self.saving = False

        self.notifier.success("Employee updated successfully", title="Saved")
        return True

    async def back(self) -> None:
        await self.location.navigate(LIST_FRAGMENT)
