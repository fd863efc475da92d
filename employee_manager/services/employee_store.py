"""Cosmos DB employee store: the gateway every view reads and writes through."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any

from azure.cosmos.aio import CosmosClient
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError
from pydantic import ValidationError as PydanticValidationError

from employee_manager.core.config import Settings
from employee_manager.core.errors import ConflictError, NotFoundError, TransportError, ValidationError
from employee_manager.models.employee import Employee, EmployeeCreate, EmployeeUpdate

logger = logging.getLogger(__name__)

# Python attribute names → document keys
_FIELD_MAP: list[tuple[str, str]] = [
    ("name", "name"),
    ("email", "email"),
    ("position", "position"),
    ("department", "department"),
    ("salary", "salary"),
    ("hire_date", "hireDate"),
    ("address", "address"),
    ("dob", "dob"),
    ("skill", "skill"),
    ("nationality", "nationality"),
]

_LIST_QUERY = "SELECT * FROM c ORDER BY c.name ASC"
_EMAIL_QUERY = "SELECT c.id FROM c WHERE c.email = @email"


def _to_document(fields: dict[str, Any]) -> dict[str, Any]:
    doc: dict[str, Any] = {}
    for python_key, doc_key in _FIELD_MAP:
        if python_key not in fields:
            continue
        value = fields[python_key]
        if isinstance(value, date):
            value = value.isoformat()
        doc[doc_key] = value
    return doc


class EmployeeStore:
    def __init__(self) -> None:
        self.client: CosmosClient | None = None
        self.container: Any = None
        self.initialized: bool = False

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        endpoint = settings.COSMOS_DB_ENDPOINT
        key = settings.COSMOS_DB_KEY
        database_name = settings.COSMOS_DB_DATABASE
        container_name = settings.COSMOS_DB_EMPLOYEES_CONTAINER

        if not endpoint or not key:
            logger.warning("Cosmos DB credentials missing — employee store not initialized")
            return

        self.client = CosmosClient(endpoint, key)
        db = self.client.get_database_client(database_name)
        self.container = db.get_container_client(container_name)
        self.initialized = True
        logger.info("EmployeeStore initialized (container=%s)", container_name)

    async def close(self) -> None:
        if self.client:
            await self.client.close()
            self.client = None
            self.container = None
            self.initialized = False

    def _require_container(self) -> Any:
        if self.container is None:
            raise TransportError("Employee store not initialized")
        return self.container

    async def insert(self, employee: EmployeeCreate) -> str:
        """Create a record and return the generated id.

        The email check and the write are two separate round trips, so two
        concurrent inserts of the same new email can both succeed.
        """
        container = self._require_container()
        if await self.check_email_exists(employee.email):
            raise ConflictError(employee.email)

        employee_id = uuid.uuid4().hex
        body = {"id": employee_id, **_to_document(employee.model_dump(exclude_none=True))}
        try:
            await container.create_item(body=body)
        except CosmosHttpResponseError as err:
            raise TransportError(err.message or str(err)) from err

        logger.info("Created employee %s", employee_id)
        return employee_id

    async def list_all(self) -> list[Employee]:
        container = self._require_container()
        results: list[Employee] = []
        try:
            async for item in container.query_items(query=_LIST_QUERY):
                try:
                    results.append(self._transform_employee(item))
                except TransportError:
                    logger.warning("Skipping malformed employee document %s", item.get("id"), exc_info=True)
        except CosmosHttpResponseError as err:
            raise TransportError(err.message or str(err)) from err
        return results

    async def fetch_by_id(self, employee_id: str) -> Employee | None:
        container = self._require_container()
        try:
            item = await container.read_item(item=employee_id, partition_key=employee_id)
        except CosmosResourceNotFoundError:
            return None
        except CosmosHttpResponseError as err:
            raise TransportError(err.message or str(err)) from err
        return self._transform_employee(item)

    async def patch(self, employee_id: str, changes: EmployeeUpdate | dict[str, Any]) -> None:
        """Write only the supplied fields; everything else keeps its stored value."""
        container = self._require_container()
        if isinstance(changes, EmployeeUpdate):
            fields = changes.model_dump(exclude_unset=True)
        else:
            try:
                fields = EmployeeUpdate(**changes).model_dump(exclude_unset=True)
            except PydanticValidationError as err:
                raise ValidationError(
                    {str(item["loc"][0]) if item["loc"] else "changes": item["msg"] for item in err.errors()}
                ) from err

        if not fields:
            return

        email = fields.get("email")
        if email is not None and await self.check_email_exists(email, exclude_id=employee_id):
            raise ConflictError(email)

        # Cosmos caps a patch at 10 operations, which is exactly the writable field count.
        operations = [
            {"op": "set", "path": f"/{doc_key}", "value": value}
            for doc_key, value in _to_document(fields).items()
        ]
        try:
            await container.patch_item(
                item=employee_id,
                partition_key=employee_id,
                patch_operations=operations,
            )
        except CosmosResourceNotFoundError as err:
            raise NotFoundError(employee_id) from err
        except CosmosHttpResponseError as err:
            raise TransportError(err.message or str(err)) from err

        logger.info("Patched employee %s (%s)", employee_id, ", ".join(sorted(fields)))

    async def delete(self, employee_id: str) -> bool:
        """Remove a record. Returns False when it was already gone."""
        container = self._require_container()
        try:
            await container.delete_item(item=employee_id, partition_key=employee_id)
        except CosmosResourceNotFoundError:
            logger.info("Employee %s already deleted", employee_id)
            return False
        except CosmosHttpResponseError as err:
            raise TransportError(err.message or str(err)) from err

        logger.info("Deleted employee %s", employee_id)
        return True

    async def check_email_exists(self, email: str, exclude_id: str | None = None) -> bool:
        container = self._require_container()
        params: list[dict[str, Any]] = [{"name": "@email", "value": email}]
        try:
            async for item in container.query_items(query=_EMAIL_QUERY, parameters=params):
                if exclude_id is None or item.get("id") != exclude_id:
                    return True
        except CosmosHttpResponseError as err:
            raise TransportError(err.message or str(err)) from err
        return False

    async def check_connection(self) -> bool:
        if not self.container:
            return False
        try:
            query = "SELECT VALUE COUNT(1) FROM c"
            async for _ in self.container.query_items(query=query):
                return True
            return True
        except Exception:
            logger.exception("Cosmos DB connection check failed")
            return False

    def _transform_employee(self, raw: dict[str, Any]) -> Employee:
        data: dict[str, Any] = {"id": raw.get("id") or "unknown"}

        for python_key, doc_key in _FIELD_MAP:
            value = raw.get(doc_key)
            if value is not None:
                data[python_key] = value

        try:
            return Employee(**data)
        except PydanticValidationError as err:
            raise TransportError(f"Malformed employee document '{data['id']}'") from err


employee_store = EmployeeStore()
