from __future__ import annotations

import base64
import time

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwt
from starlette.testclient import TestClient

from app.core.dependencies import get_current_user, get_query_engine
from app.main import app
from app.models.auth import UserInfo
from app.services.employee_store import InMemoryEmployeeStore
from app.services.query_engine import EmployeeQueryEngine

TEST_TENANT_ID = "test-tenant-00000000-0000-0000-0000-000000000000"
TEST_CLIENT_ID = "test-client-00000000-0000-0000-0000-000000000000"
TEST_KID = "test-kid-1"


def _employee(empno, name, position, dept, status, rrn=None, **extra):
    doc = {
        "id": empno,
        "empno": empno,
        "name": name,
        "position": position,
        "fk_deptno": dept,
        "deptname": {"10": "Sales", "20": "Engineering", "30": "Finance"}[dept],
        "status": status,
        "hiredate": "2020-01-15",
        "email": f"{name.lower()}@directory.test",
        "mobile": f"010-0000-{empno}",
        "profile_color": "#4a90d9",
    }
    if rrn:
        doc["rrn"] = rrn
    doc.update(extra)
    return doc


SAMPLE_EMPLOYEE_DOCS: list[dict] = [
    _employee("1001", "Asmith", "Manager", "10", "employed", "900101-1234567"),
    _employee("1002", "Bjones", "Engineer", "20", "employed", "920202-2345678"),
    _employee("1003", "Csmith", "Engineer", "10", "leave"),
    _employee("1004", "Dlee", "Analyst", "30", "employed", "880303-1456789"),
    _employee("1005", "Epark", "Engineer", "20", "retired", retiredate="2023-06-30"),
    _employee("1006", "Fkim", "Manager", "20", "employed", "950505-2567890"),
    _employee("1007", "Gchoi", "Analyst", "10", "employed"),
    _employee("1008", "Hsmithson", "Engineer", "30", "employed", "990909-3678901"),
    _employee("1009", "Ijung", "Analyst", "20", "leave", "000101-4789012"),
    _employee("1010", "Jyoon", "Engineer", "10", "employed"),
    _employee("1011", "Kshin", "Manager", "30", "retired", "870707-1890123", retiredate="2024-02-29"),
    _employee("1012", "Lhan", "Engineer", "20", "employed", "930303-2901234"),
]


def _int_to_base64url(value: int) -> str:
    byte_length = (value.bit_length() + 7) // 8
    return base64.urlsafe_b64encode(value.to_bytes(byte_length, byteorder="big")).rstrip(b"=").decode("ascii")


@pytest.fixture(autouse=True)
def _auth_settings():
    from app.core.config import settings

    original_tenant = settings.AZURE_AD_TENANT_ID
    original_client = settings.AZURE_AD_CLIENT_ID
    settings.AZURE_AD_TENANT_ID = TEST_TENANT_ID
    settings.AZURE_AD_CLIENT_ID = TEST_CLIENT_ID
    yield
    settings.AZURE_AD_TENANT_ID = original_tenant
    settings.AZURE_AD_CLIENT_ID = original_client


@pytest.fixture
def employee_store():
    return InMemoryEmployeeStore(SAMPLE_EMPLOYEE_DOCS)


@pytest.fixture
def query_engine(employee_store):
    return EmployeeQueryEngine(employee_store, page_size=10)


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
    return private_pem, {"keys": [jwk_dict]}


def _make_token(
    private_pem: str,
    *,
    oid: str = "test-oid-123",
    name: str = "Test User",
    email: str = "test@directory.test",
    roles: list[str] | None = None,
    expired: bool = False,
) -> str:
    now = int(time.time())
    claims = {
        "oid": oid,
        "name": name,
        "preferred_username": email,
        "roles": roles or [],
        "iss": f"https://login.microsoftonline.com/{TEST_TENANT_ID}/v2.0",
        "aud": TEST_CLIENT_ID,
        "exp": now - 3600 if expired else now + 3600,
        "iat": now - 60,
        "nbf": now - 60,
    }
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": TEST_KID})


@pytest.fixture
def mock_user_viewer():
    return UserInfo(id="viewer-1", name="Viewer User", email="viewer@directory.test", roles=["viewer"])


@pytest.fixture
def mock_user_admin():
    return UserInfo(id="admin-1", name="Admin User", email="admin@directory.test", roles=["admin"])


@pytest.fixture
def authenticated_client(mock_user_admin):
    app.dependency_overrides[get_current_user] = lambda: mock_user_admin
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def directory_client(mock_user_admin, query_engine):
    app.dependency_overrides[get_current_user] = lambda: mock_user_admin
    app.dependency_overrides[get_query_engine] = lambda: query_engine
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
