"""Employee list view: loads every record, runs the two-step add form and delete confirmation."""

from __future__ import annotations

import logging

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from employee_manager.core.errors import ConflictError, ValidationError
from employee_manager.models.employee import Employee, EmployeeCreate
from employee_manager.services.employee_store import EmployeeStore
from employee_manager.ui.location import HashLocation
from employee_manager.ui.notifications import Notifier
from employee_manager.ui.router import employee_fragment

logger = logging.getLogger(__name__)

STEP_LABELS: tuple[str, ...] = ("Basic info", "Job details")

DUPLICATE_EMAIL_MESSAGE = "An employee with this email already exists"

_FIELD_LABELS: dict[str, str] = {
    "name": "Name",
    "email": "Email",
    "position": "Position",
    "department": "Department",
    "salary": "Salary",
    "hire_date": "Hire date",
}


class EmployeeDraft(BaseModel):
    """Add-form values exactly as typed."""

    name: str = ""
    email: str = ""
    position: str = ""
    department: str = ""
    salary: str = ""
    hire_date: str = ""


def _require(draft: EmployeeDraft, fields: tuple[str, ...]) -> dict[str, str]:
    return {
        field: f"{_FIELD_LABELS[field]} is required"
        for field in fields
        if not str(getattr(draft, field)).strip()
    }


def validate_step_one(draft: EmployeeDraft) -> None:
    errors = _require(draft, ("name", "email"))
    if errors:
        raise ValidationError(errors)


def build_employee(draft: EmployeeDraft) -> EmployeeCreate:
    """Validate the whole draft and convert it into an insertable record."""
    errors = _require(draft, ("name", "email", "position", "department", "salary", "hire_date"))
    if errors:
        raise ValidationError(errors)

    try:
        return EmployeeCreate(
            name=draft.name.strip(),
            email=draft.email.strip(),
            position=draft.position.strip(),
            department=draft.department.strip(),
            salary=draft.salary.strip(),
            hire_date=draft.hire_date.strip(),
        )
    except PydanticValidationError as err:
        messages: dict[str, str] = {}
        for item in err.errors():
            field = str(item["loc"][0]) if item["loc"] else "form"
            if field == "salary":
                messages[field] = "Salary must be a number greater than or equal to 0"
            elif field == "hire_date":
                messages[field] = "Hire date must be a valid date (YYYY-MM-DD)"
            else:
                messages[field] = item["msg"]
        raise ValidationError(messages) from err


class EmployeeListController:
    def __init__(self, store: EmployeeStore, notifier: Notifier, location: HashLocation) -> None:
        self.store = store
        self.notifier = notifier
        self.location = location

        self.employees: list[Employee] = []
        self.loading = True
        self.error = ""
        self.mounted = False

        self.form_open = False
        self.step = 1
        self.draft = EmployeeDraft()
        self.form_errors: dict[str, str] = {}
        self.saving = False

        self.pending_delete_id: str | None = None
        self.deleting = False

    @property
    def step_labels(self) -> tuple[str, ...]:
        return STEP_LABELS

    @property
    def progress_percent(self) -> float:
        return (self.step - 1) / (len(STEP_LABELS) - 1) * 100

    async def mount(self) -> None:
        self.mounted = True
        await self.load()

    def unmount(self) -> None:
        self.mounted = False

    async def load(self) -> None:
        self.loading = True
        try:
            employees = await self.store.list_all()
        except Exception as err:
            logger.exception("Failed to load employees")
            if self.mounted:
                self.error = f"Failed to load employees: {err}"
                self.loading = False
            return

        if not self.mounted:
            return
        self.employees = employees
        self.error = ""
        self.loading = False

    def open_form(self) -> None:
        self.form_open = True
        self.step = 1
        self.form_errors = {}

    def cancel_form(self) -> None:
        self.form_open = False
        self._reset_draft()

    def update_draft(self, **fields: str) -> None:
        self.draft = self.draft.model_copy(update=fields)
        for field in fields:
            self.form_errors.pop(field, None)

    def back(self) -> None:
        self.step = 1
        self.form_errors = {}

    async def submit(self) -> bool:
        """Advance from step one, or create the employee from step two.

        Returns True only when a record was created.
        """
        if self.step == 1:
            try:
                validate_step_one(self.draft)
            except ValidationError as err:
                self.form_errors = err.errors
                return False
            self.form_errors = {}
            self.step = 2
            return False

        try:
            employee = build_employee(self.draft)
        except ValidationError as err:
            self.form_errors = err.errors
            return False

        self.form_errors = {}
        self.saving = True
        try:
            await self.store.insert(employee)
        except ConflictError:
            self.notifier.error(DUPLICATE_EMAIL_MESSAGE)
            return False
        except Exception as err:
            logger.exception("Failed to save employee")
            self.notifier.error(f"Failed to save employee: {err}")
            return False
        finally:
            self.saving = False

        self.notifier.success(f"{employee.name} was added")
        self.form_open = False
        self._reset_draft()
        if self.mounted:
            await self.load()
        return True

    def request_delete(self, employee_id: str) -> None:
        self.pending_delete_id = employee_id

    def cancel_delete(self) -> None:
        self.pending_delete_id = None

    async def confirm_delete(self) -> None:
        employee_id = self.pending_delete_id
        if employee_id is None:
            return

        self.deleting = True
        try:
            await self.store.delete(employee_id)
        except Exception as err:
            logger.exception("Failed to delete employee %s", employee_id)
            self.notifier.error(f"Failed to delete employee: {err}")
        else:
            self.notifier.success("Employee deleted")
        finally:
            self.deleting = False
            self.pending_delete_id = None

        if self.mounted:
            await self.load()

    async def view(self, employee_id: str) -> None:
        await self.location.navigate(employee_fragment(employee_id))

    def _reset_draft(self) -> None:
        self.step = 1
        self.draft = EmployeeDraft()
        self.form_errors = {}
