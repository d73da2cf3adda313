"""Authentication and account tests."""

import uuid
from datetime import UTC, datetime, timedelta

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from milkbook.core.auth import (
    create_access_token,
    hash_password,
    verify_access_token,
    verify_password,
)
from milkbook.core.config import settings
from milkbook.models.account import Account
from milkbook.models.customer import Customer
from milkbook.models.delivery import Delivery


class TestPasswordHashing:
    def test_hash_and_verify(self) -> None:
        hashed = hash_password("s3cret-pass")
        assert hashed != "s3cret-pass"
        assert verify_password("s3cret-pass", hashed)
        assert not verify_password("wrong-pass", hashed)

    def test_missing_hash_never_verifies(self) -> None:
        assert not verify_password("anything", None)


class TestTokens:
    def test_round_trip(self) -> None:
        account_id = uuid.uuid4()
        token = create_access_token(account_id, "someone")
        assert verify_access_token(token) == account_id

    def test_wrong_type_rejected(self) -> None:
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "type": "refresh"},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(jwt.InvalidTokenError):
            verify_access_token(token)


class TestAuthDependency:
    def test_missing_header(self, anon_client: TestClient) -> None:
        response = anon_client.get("/v1/customers")
        assert response.status_code == 401
        assert response.json()["error"] == "Missing or invalid Authorization header"

    def test_wrong_scheme(self, anon_client: TestClient) -> None:
        response = anon_client.get("/v1/customers", headers={"Authorization": "Basic abc"})
        assert response.status_code == 401

    def test_garbage_token(self, anon_client: TestClient) -> None:
        response = anon_client.get("/v1/customers", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid or expired token"

    def test_expired_token(self, anon_client: TestClient, default_account_id: uuid.UUID) -> None:
        token = jwt.encode(
            {
                "sub": str(default_account_id),
                "type": "access",
                "exp": datetime.now(UTC) - timedelta(minutes=1),
            },
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        response = anon_client.get(
            "/v1/customers", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401
        assert response.json()["error"] == "Token has expired"

    def test_foreign_secret_rejected(
        self, anon_client: TestClient, default_account_id: uuid.UUID
    ) -> None:
        token = jwt.encode(
            {"sub": str(default_account_id), "type": "access"},
            "some-other-secret",
            algorithm="HS256",
        )
        response = anon_client.get(
            "/v1/customers", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401


class TestRegisterAndLogin:
    def test_register(self, anon_client: TestClient) -> None:
        response = anon_client.post(
            "/v1/auth/register",
            json={
                "username": "newdairy",
                "fullname": "New Dairy",
                "address": "7 River Road",
                "password": "longenough",
            },
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["account"]["username"] == "newdairy"

        me = anon_client.get(
            "/v1/accounts/me", headers={"Authorization": f"Bearer {data['token']}"}
        )
        assert me.status_code == 200
        assert me.json()["data"]["fullname"] == "New Dairy"

    def test_register_duplicate_username(
        self, anon_client: TestClient, default_credentials: dict[str, str]
    ) -> None:
        response = anon_client.post(
            "/v1/auth/register",
            json={
                "username": default_credentials["username"],
                "fullname": "Copycat",
                "address": "Nowhere 1",
                "password": "longenough",
            },
        )
        assert response.status_code == 409

    def test_register_short_password(self, anon_client: TestClient) -> None:
        response = anon_client.post(
            "/v1/auth/register",
            json={"username": "abc", "fullname": "Abc", "address": "Somewhere", "password": "x"},
        )
        assert response.status_code == 422

    def test_login(self, anon_client: TestClient, default_credentials: dict[str, str]) -> None:
        response = anon_client.post("/v1/auth/login", json=default_credentials)
        assert response.status_code == 200
        token = response.json()["data"]["token"]
        assert anon_client.get(
            "/v1/customers", headers={"Authorization": f"Bearer {token}"}
        ).status_code == 200

    def test_login_wrong_password(
        self, anon_client: TestClient, default_credentials: dict[str, str]
    ) -> None:
        response = anon_client.post(
            "/v1/auth/login",
            json={"username": default_credentials["username"], "password": "not-the-one"},
        )
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid username or password"

    def test_login_unknown_user(self, anon_client: TestClient) -> None:
        response = anon_client.post(
            "/v1/auth/login", json={"username": "ghost", "password": "whatever1"}
        )
        assert response.status_code == 401


class TestAccountEndpoints:
    def test_me(self, client: TestClient) -> None:
        data = client.get("/v1/accounts/me").json()["data"]
        assert data["username"] == "dairyfarm"
        assert "password_hash" not in data

    def test_token_of_unknown_account_rejected(self, anon_client: TestClient) -> None:
        token = create_access_token(uuid.uuid4(), "ghost")
        response = anon_client.get("/v1/accounts/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["error"] == "Account no longer exists"

    def test_change_password(
        self, client: TestClient, anon_client: TestClient, default_credentials: dict[str, str]
    ) -> None:
        response = client.put(
            "/v1/accounts/me/password",
            json={
                "current_password": default_credentials["password"],
                "new_password": "brand-new-pass",
            },
        )
        assert response.status_code == 200

        old = anon_client.post("/v1/auth/login", json=default_credentials)
        assert old.status_code == 401
        new = anon_client.post(
            "/v1/auth/login",
            json={"username": default_credentials["username"], "password": "brand-new-pass"},
        )
        assert new.status_code == 200

    def test_change_password_wrong_current(self, client: TestClient) -> None:
        response = client.put(
            "/v1/accounts/me/password",
            json={"current_password": "not-my-pass", "new_password": "brand-new-pass"},
        )
        assert response.status_code == 401

    def test_delete_cascades(
        self, client: TestClient, db_session: Session, default_account_id: uuid.UUID
    ) -> None:
        customer = client.post(
            "/v1/customers", json={"name": "Alice", "rate_per_litre": "50"}
        ).json()["data"]
        client.post(
            "/v1/deliveries",
            json={"customer_id": customer["id"], "delivery_date": "2024-01-01", "status": "absent"},
        )

        assert client.delete("/v1/accounts/me").status_code == 200

        db_session.expire_all()
        assert db_session.query(Account).filter(Account.id == default_account_id).first() is None
        assert db_session.query(Customer).count() == 0
        assert db_session.query(Delivery).count() == 0

    def test_token_unusable_after_delete(self, client: TestClient, db_session: Session) -> None:
        assert client.delete("/v1/accounts/me").status_code == 200

        customer = client.post("/v1/customers", json={"name": "Alice", "rate_per_litre": "50"})
        assert customer.status_code == 401
        delivery = client.post(
            "/v1/deliveries", json={"delivery_date": "2024-01-01", "status": "absent"}
        )
        assert delivery.status_code == 401

        db_session.expire_all()
        assert db_session.query(Customer).count() == 0
        assert db_session.query(Delivery).count() == 0


class TestForeignKeys:
    def test_orphan_customer_rejected(self, db_session: Session) -> None:
        db_session.add(Customer(account_id=uuid.uuid4(), name="Orphan", rate_per_litre=50))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()
