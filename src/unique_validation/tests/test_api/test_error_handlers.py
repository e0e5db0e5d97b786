import pytest
from bson import ObjectId
from fastapi import FastAPI
from fastapi.testclient import TestClient

from unique_validation.api.error_handlers import register_exception_handlers
from unique_validation.exceptions.base import (
    DocumentValidationError,
    UniqueValidationError,
    ValidatorError,
)

OWNER_ID = ObjectId("5f43a1b2c3d4e5f6a7b8c9d0")


@pytest.fixture
def client() -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)

    @app.post("/users")
    async def create_user():
        raise DocumentValidationError(
            {
                "email": ValidatorError(path="email", value="a@b.c", message="Email a@b.c is taken"),
                "owner": ValidatorError(path="owner", value=OWNER_ID, message="owner taken"),
            }
        )

    @app.post("/conflict")
    async def conflict():
        raise UniqueValidationError("already there", fields=["slug"], error_code="duplicate")

    @app.post("/other")
    async def other():
        raise UniqueValidationError("bad request")

    return TestClient(app)


def test_validation_error_is_rendered_as_422(client):
    """
    Behavior:
            - A DocumentValidationError leaving a route becomes a 422 with one entry
                    per field; ObjectId values are rendered as strings.
    """
    response = client.post("/users")

    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "validation"
    assert body["fields"] == ["email", "owner"]
    assert body["errors"]["email"] == {
        "kind": "duplicate",
        "path": "email",
        "value": "a@b.c",
        "message": "Email a@b.c is taken",
    }
    assert body["errors"]["owner"]["value"] == str(OWNER_ID)
    assert body["detail"] == "Validation failed: email: Email a@b.c is taken, owner: owner taken"


def test_other_package_errors_use_their_status(client):
    conflict = client.post("/conflict")
    other = client.post("/other")

    assert conflict.status_code == 409
    assert conflict.json() == {"detail": "already there", "code": "duplicate", "fields": ["slug"]}
    assert other.status_code == 400
    assert other.json() == {"detail": "bad request"}
