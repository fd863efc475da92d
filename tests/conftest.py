from __future__ import annotations

import base64
import copy
import time
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from azure.cosmos.exceptions import CosmosResourceNotFoundError
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwt
from starlette.testclient import TestClient

from employee_manager.core.dependencies import get_current_user
from employee_manager.main import app
from employee_manager.models.auth import Identity, UserInfo
from employee_manager.services.employee_store import EmployeeStore

TEST_PROJECT_ID = "employee-mng-test"
TEST_KID = "test-kid-1"


def _int_to_base64url(value: int) -> str:
    byte_length = (value.bit_length() + 7) // 8
    return base64.urlsafe_b64encode(value.to_bytes(byte_length, byteorder="big")).rstrip(b"=").decode("ascii")


class FakeContainer:
    """In-memory stand-in for a Cosmos container partitioned on ``/id``."""

    def __init__(self) -> None:
        self.docs: dict[str, dict[str, Any]] = {}
        self.writes = 0

    async def create_item(self, body: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        self.writes += 1
        self.docs[body["id"]] = copy.deepcopy(body)
        return copy.deepcopy(body)

    async def read_item(self, item: str, partition_key: str, **kwargs: Any) -> dict[str, Any]:
        if item not in self.docs:
            raise CosmosResourceNotFoundError(status_code=404, message=f"{item} does not exist")
        return copy.deepcopy(self.docs[item])

    async def patch_item(
        self,
        item: str,
        partition_key: str,
        patch_operations: list[dict[str, Any]],
        **kwargs: Any,
    ) -> dict[str, Any]:
        if item not in self.docs:
            raise CosmosResourceNotFoundError(status_code=404, message=f"{item} does not exist")
        self.writes += 1
        for operation in patch_operations:
            assert operation["op"] == "set"
            self.docs[item][operation["path"].lstrip("/")] = operation["value"]
        return copy.deepcopy(self.docs[item])

    async def delete_item(self, item: str, partition_key: str, **kwargs: Any) -> None:
        if item not in self.docs:
            raise CosmosResourceNotFoundError(status_code=404, message=f"{item} does not exist")
        self.writes += 1
        del self.docs[item]

    def query_items(self, query: str, parameters: list[dict[str, Any]] | None = None, **kwargs: Any):
        params = {p["name"]: p["value"] for p in parameters or []}
        docs = [copy.deepcopy(doc) for doc in self.docs.values()]

        async def _iterate():
            if "@email" in params:
                for doc in docs:
                    if doc.get("email") == params["@email"]:
                        yield {"id": doc["id"]}
            elif "COUNT(1)" in query:
                yield len(docs)
            else:
                if "ORDER BY c.name" in query:
                    docs.sort(key=lambda d: d.get("name", ""))
                for doc in docs:
                    yield doc

        return _iterate()


@pytest.fixture(autouse=True)
def _auth_settings():
    from employee_manager.core.config import settings

    original_project = settings.FIREBASE_PROJECT_ID
    settings.FIREBASE_PROJECT_ID = TEST_PROJECT_ID
    yield
    settings.FIREBASE_PROJECT_ID = original_project


@pytest.fixture
def fake_container() -> FakeContainer:
    return FakeContainer()


@pytest.fixture
def store(fake_container) -> EmployeeStore:
    employee_store = EmployeeStore()
    employee_store.container = fake_container
    employee_store.initialized = True
    return employee_store


@pytest.fixture
def employee_payload() -> dict[str, Any]:
    return {
        "name": "Ada Lovelace",
        "email": "ada@x.com",
        "position": "Analyst",
        "department": "Research",
        "salary": 85000,
        "hire_date": "2021-03-01",
    }


@pytest.fixture
def identity() -> Identity:
    return Identity(uid="uid-1", email="ada@x.com", id_token="id-token", refresh_token="refresh-token")


@pytest.fixture
def identity_service(identity) -> MagicMock:
    service = MagicMock()
    service.sign_in = AsyncMock(return_value=identity)
    service.sign_up = AsyncMock(return_value=identity)
    service.refresh = AsyncMock(return_value=identity)
    service.sign_out = AsyncMock(return_value=None)
    return service


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def rsa_test_keys():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("utf-8")

    pub = private_key.public_key().public_numbers()
    jwk_dict = {
        "kty": "RSA",
        "kid": TEST_KID,
        "use": "sig",
        "alg": "RS256",
        "n": _int_to_base64url(pub.n),
        "e": _int_to_base64url(pub.e),
    }
    jwks_response = {"keys": [jwk_dict]}
    return private_pem, jwks_response


def _make_token(
    private_pem: str,
    *,
    uid: str = "test-uid-123",
    name: str = "Test User",
    email: str = "test@example.com",
    audience: str = TEST_PROJECT_ID,
    expired: bool = False,
) -> str:
    now = int(time.time())
    claims = {
        "sub": uid,
        "user_id": uid,
        "name": name,
        "email": email,
        "iss": f"https://securetoken.google.com/{TEST_PROJECT_ID}",
        "aud": audience,
        "exp": now - 3600 if expired else now + 3600,
        "iat": now - 60,
        "auth_time": now - 60,
    }
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": TEST_KID})


@pytest.fixture
def mock_user():
    return UserInfo(id="user-1", name="Test User", email="test@example.com")


@pytest.fixture
def authenticated_client(mock_user, store, monkeypatch):
    monkeypatch.setattr("employee_manager.api.v1.endpoints.employees.employee_store", store)
    app.dependency_overrides[get_current_user] = lambda: mock_user
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
