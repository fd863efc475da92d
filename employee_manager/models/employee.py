"""Employee models for the Cosmos DB employees container."""

from __future__ import annotations

from datetime import date
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field, field_validator


def _check_iso_date(value: str) -> str:
    if value:
        date.fromisoformat(value)
    return value


# Extended date fields stay strings; an empty string means "not set".
IsoDateString = Annotated[str, AfterValidator(_check_iso_date)]


class EmployeeCreate(BaseModel):
    """Validated input for a new employee; the store assigns the id."""

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)
    salary: float = Field(..., ge=0, allow_inf_nan=False)
    hire_date: date
    address: str | None = None
    dob: IsoDateString | None = None
    skill: str | None = None
    nationality: str | None = None


class EmployeeUpdate(BaseModel):
    """Partial update; only fields that were explicitly set are written."""

    name: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, min_length=1)
    position: str | None = Field(default=None, min_length=1)
    department: str | None = Field(default=None, min_length=1)
    salary: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    hire_date: date | None = None
    address: str | None = None
    dob: IsoDateString | None = None
    skill: str | None = None
    nationality: str | None = None

    @field_validator("name", "email", "position", "department", "salary", "hire_date")
    @classmethod
    def required_not_null(cls, value):
        # Omit a required field to leave it unchanged; null would erase it.
        if value is None:
            raise ValueError("This field is required")
        return value


class Employee(BaseModel):
    """Employee as read back from the store.

    Documents are schemaless, so every field tolerates being absent.
    """

    id: str
    name: str = ""
    email: str = ""
    position: str = ""
    department: str = ""
    salary: float = 0
    hire_date: str = ""
    address: str | None = None
    dob: str | None = None
    skill: str | None = None
    nationality: str | None = None
