"""Hash-fragment routing: maps a location string to the view that should be shown."""

from __future__ import annotations

import re
from enum import Enum
from urllib.parse import quote, unquote

from pydantic import BaseModel

LIST_FRAGMENT = "#/"

_DETAIL_PATTERN = re.compile(r"#?/employees/([^/]+)")


class ViewName(str, Enum):
    AUTH = "auth"
    LIST = "list"
    DETAIL = "detail"


class Route(BaseModel):
    view: ViewName
    params: dict[str, str] = {}


def resolve_route(location: str | None) -> Route:
    """Resolve a fragment such as ``#/employees/42``.

    Unrecognized fragments, including the empty one, fall back to the list.
    """
    match = _DETAIL_PATTERN.fullmatch(location or "")
    if match:
        employee_id = unquote(match.group(1))
        if employee_id:
            return Route(view=ViewName.DETAIL, params={"employee_id": employee_id})
    return Route(view=ViewName.LIST)


def employee_fragment(employee_id: str) -> str:
    return f"#/employees/{quote(employee_id, safe='')}"
