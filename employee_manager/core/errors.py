"""Error taxonomy shared by the gateway, the session and the view controllers."""

from __future__ import annotations


class EmployeeManagerError(Exception):
    """Base class for every error surfaced to the user."""


class ValidationError(EmployeeManagerError):
    """A draft failed client-side validation and must not reach the store."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))


class ConflictError(EmployeeManagerError):
    """Another record already uses the email."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"An employee with email '{email}' already exists")


class NotFoundError(EmployeeManagerError):
    def __init__(self, employee_id: str) -> None:
        self.employee_id = employee_id
        super().__init__(f"Employee '{employee_id}' not found")


class TransportError(EmployeeManagerError):
    """Any other failure reported by the document store or the identity provider."""


class AuthenticationError(TransportError):
    pass
