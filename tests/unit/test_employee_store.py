from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError
from pydantic import ValidationError as PydanticValidationError

from employee_manager.core.errors import ConflictError, NotFoundError, TransportError, ValidationError
from employee_manager.models.employee import Employee, EmployeeCreate, EmployeeUpdate
from employee_manager.services.employee_store import EmployeeStore


SAMPLE_COSMOS_DOC = {
    "id": "4f1c",
    "name": "Grace Hopper",
    "email": "grace@x.com",
    "position": "Rear Admiral",
    "department": "Navy",
    "salary": 120000,
    "hireDate": "1943-12-01",
    "address": "Arlington, VA",
    "nationality": "American",
}


def _employee(**overrides) -> EmployeeCreate:
    data = {
        "name": "Ada Lovelace",
        "email": "ada@x.com",
        "position": "Analyst",
        "department": "Research",
        "salary": 85000,
        "hire_date": "2021-03-01",
    }
    data.update(overrides)
    return EmployeeCreate(**data)


def test_transform_employee_maps_fields():
    store = EmployeeStore()
    result = store._transform_employee(SAMPLE_COSMOS_DOC)

    assert isinstance(result, Employee)
    assert result.id == "4f1c"
    assert result.name == "Grace Hopper"
    assert result.hire_date == "1943-12-01"
    assert result.salary == 120000
    assert result.address == "Arlington, VA"
    assert result.dob is None
    assert result.skill is None


def test_transform_employee_handles_empty_doc():
    result = EmployeeStore()._transform_employee({})

    assert result.id == "unknown"
    assert result.name == ""
    assert result.salary == 0


@pytest.mark.anyio
async def test_insert_then_fetch_returns_same_fields(store, fake_container):
    employee_id = await store.insert(_employee(skill="Mathematics"))

    fetched = await store.fetch_by_id(employee_id)

    assert fetched is not None
    assert fetched.id == employee_id
    assert fetched.name == "Ada Lovelace"
    assert fetched.email == "ada@x.com"
    assert fetched.position == "Analyst"
    assert fetched.department == "Research"
    assert fetched.salary == 85000
    assert fetched.hire_date == "2021-03-01"
    assert fetched.skill == "Mathematics"
    assert fake_container.docs[employee_id]["hireDate"] == "2021-03-01"


@pytest.mark.anyio
async def test_insert_generates_distinct_ids(store):
    first = await store.insert(_employee(email="one@x.com"))
    second = await store.insert(_employee(email="two@x.com"))

    assert first != second


@pytest.mark.anyio
async def test_insert_duplicate_email_raises_conflict_without_write(store, fake_container):
    await store.insert(_employee(name="A", email="a@x.com"))
    await store.insert(_employee(name="B", email="b@x.com"))
    writes = fake_container.writes

    with pytest.raises(ConflictError):
        await store.insert(_employee(name="C", email="a@x.com"))

    assert fake_container.writes == writes
    assert len(await store.list_all()) == 2


@pytest.mark.anyio
async def test_list_all_sorted_by_name(store):
    for name in ("Charles Babbage", "Ada Lovelace", "Blaise Pascal", "Alan Turing"):
        await store.insert(_employee(name=name, email=f"{name.split()[0].lower()}@x.com"))

    names = [employee.name for employee in await store.list_all()]

    assert names == sorted(names)
    assert names[0] == "Ada Lovelace"


@pytest.mark.anyio
async def test_fetch_by_id_missing_returns_none(store):
    assert await store.fetch_by_id("does-not-exist") is None


@pytest.mark.anyio
async def test_patch_changes_only_supplied_field(store):
    employee_id = await store.insert(_employee(address="London"))
    before = await store.fetch_by_id(employee_id)

    await store.patch(employee_id, EmployeeUpdate(salary=90000))

    after = await store.fetch_by_id(employee_id)
    assert after.salary == 90000
    assert after.model_dump(exclude={"salary"}) == before.model_dump(exclude={"salary"})


@pytest.mark.anyio
async def test_patch_accepts_plain_dict(store):
    employee_id = await store.insert(_employee())

    await store.patch(employee_id, {"department": "Engineering"})

    assert (await store.fetch_by_id(employee_id)).department == "Engineering"


@pytest.mark.anyio
async def test_patch_with_own_email_is_not_a_conflict(store):
    employee_id = await store.insert(_employee())

    await store.patch(employee_id, EmployeeUpdate(email="ada@x.com", position="Lead Analyst"))

    assert (await store.fetch_by_id(employee_id)).position == "Lead Analyst"


@pytest.mark.anyio
async def test_patch_with_other_records_email_raises_conflict(store, fake_container):
    await store.insert(_employee(name="A", email="a@x.com"))
    target = await store.insert(_employee(name="B", email="b@x.com"))
    writes = fake_container.writes

    with pytest.raises(ConflictError):
        await store.patch(target, EmployeeUpdate(email="a@x.com"))

    assert fake_container.writes == writes
    assert (await store.fetch_by_id(target)).email == "b@x.com"


@pytest.mark.anyio
async def test_patch_missing_record_raises_not_found(store):
    with pytest.raises(NotFoundError):
        await store.patch("nope", EmployeeUpdate(name="Nobody"))


@pytest.mark.anyio
async def test_patch_with_nothing_set_does_not_write(store, fake_container):
    employee_id = await store.insert(_employee())
    writes = fake_container.writes

    await store.patch(employee_id, EmployeeUpdate())

    assert fake_container.writes == writes


@pytest.mark.anyio
async def test_delete_then_fetch_is_not_found(store):
    employee_id = await store.insert(_employee())

    assert await store.delete(employee_id) is True
    assert await store.fetch_by_id(employee_id) is None


@pytest.mark.anyio
async def test_delete_missing_record_is_idempotent(store):
    assert await store.delete("never-existed") is False


@pytest.mark.anyio
async def test_check_email_exists_excludes_own_id(store):
    employee_id = await store.insert(_employee())

    assert await store.check_email_exists("ada@x.com") is True
    assert await store.check_email_exists("ada@x.com", exclude_id=employee_id) is False
    assert await store.check_email_exists("other@x.com") is False


@pytest.mark.anyio
async def test_operations_require_initialized_store():
    store = EmployeeStore()

    with pytest.raises(TransportError):
        await store.list_all()
    with pytest.raises(TransportError):
        await store.insert(_employee())


@pytest.mark.anyio
async def test_cosmos_errors_become_transport_errors():
    store = EmployeeStore()
    container = MagicMock()
    container.read_item = AsyncMock(side_effect=CosmosHttpResponseError(status_code=503, message="unavailable"))
    store.container = container
    store.initialized = True

    with pytest.raises(TransportError):
        await store.fetch_by_id("4f1c")


@pytest.mark.anyio
async def test_check_connection_success(store):
    assert await store.check_connection() is True


@pytest.mark.anyio
async def test_check_connection_not_initialized():
    store = EmployeeStore()
    assert await store.check_connection() is False


@pytest.mark.anyio
async def test_patch_rejects_null_for_required_fields(store, fake_container):
    employee_id = await store.insert(_employee())
    writes = fake_container.writes

    with pytest.raises(ValidationError) as exc_info:
        await store.patch(employee_id, {"name": None, "salary": None})

    assert set(exc_info.value.errors) == {"name", "salary"}
    assert fake_container.writes == writes
    stored = await store.fetch_by_id(employee_id)
    assert stored.name == "Ada Lovelace"
    assert stored.salary == 85000


def test_update_model_rejects_null_email():
    with pytest.raises(PydanticValidationError):
        EmployeeUpdate(email=None)


def test_update_model_allows_clearing_optional_fields():
    update = EmployeeUpdate(address=None)

    assert update.model_dump(exclude_unset=True) == {"address": None}


@pytest.mark.parametrize("salary", ["inf", "-inf", "nan", 1e400])
def test_models_reject_non_finite_salary(salary):
    with pytest.raises(PydanticValidationError):
        _employee(salary=salary)
    with pytest.raises(PydanticValidationError):
        EmployeeUpdate(salary=salary)


@pytest.mark.anyio
async def test_list_all_skips_malformed_documents(store, fake_container):
    await store.insert(_employee())
    fake_container.docs["bad"] = {"id": "bad", "name": "Broken", "hireDate": 1700000000, "salary": "n/a"}

    employees = await store.list_all()

    assert [e.name for e in employees] == ["Ada Lovelace"]


@pytest.mark.anyio
async def test_fetch_malformed_document_raises_transport_error(store, fake_container):
    fake_container.docs["bad"] = {"id": "bad", "name": "Broken", "salary": "n/a"}

    with pytest.raises(TransportError):
        await store.fetch_by_id("bad")
