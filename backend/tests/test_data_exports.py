"""Export and import reconciliation tests."""

import csv
import io
import uuid
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from milkbook.models.customer import Customer
from milkbook.models.delivery import Delivery
from milkbook.schemas.data_export import ImportPayload
from milkbook.services.data_export_service import CSV_FIELDS, DataExportService


def _seed(client: TestClient) -> dict:
    customer = client.post(
        "/v1/customers",
        json={"name": "Alice", "contact": "555-0101", "rate_per_litre": "50"},
    ).json()["data"]
    client.post(
        "/v1/deliveries",
        json={
            "customer_id": customer["id"],
            "delivery_date": "2024-01-01",
            "status": "delivered",
            "quantity": "2",
        },
    )
    client.post("/v1/deliveries", json={"delivery_date": "2024-01-05", "status": "absent"})
    return customer


class TestExport:
    def test_json_snapshot(self, client: TestClient) -> None:
        _seed(client)
        response = client.get("/v1/export/json")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["account"]["username"] == "dairyfarm"
        assert "password_hash" not in data["account"]
        assert [c["name"] for c in data["customers"]] == ["Alice"]
        assert [d["delivery_date"] for d in data["deliveries"]] == ["2024-01-05", "2024-01-01"]
        assert data["deliveries"][1]["customer_name"] == "Alice"
        assert data["exported_at"]

    def test_csv(self, client: TestClient) -> None:
        _seed(client)
        response = client.get("/v1/export/csv")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="milk-data-dairyfarm-')

        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == CSV_FIELDS
        assert rows[1][:2] == ["2024-01-05", ""]
        assert rows[2][0] == "2024-01-01"
        assert rows[2][1] == "Alice"
        assert rows[2][6] == "555-0101"


class TestImport:
    def test_round_trip_into_fresh_account(
        self, client: TestClient, db_session: Session, make_account
    ) -> None:
        _seed(client)
        snapshot = client.get("/v1/export/json").json()["data"]

        other = make_account("newfarm")
        result = DataExportService(db_session).import_snapshot(
            other.id,
            ImportPayload(customers=snapshot["customers"], deliveries=snapshot["deliveries"]),
        )
        assert (result.imported, result.updated, result.errors) == (3, 0, 0)

        db_session.expire_all()
        imported_customer = db_session.query(Customer).filter(Customer.account_id == other.id).one()
        linked = (
            db_session.query(Delivery)
            .filter(Delivery.account_id == other.id, Delivery.customer_id.isnot(None))
            .one()
        )
        assert linked.customer_id == imported_customer.id

    def test_reimport_updates(self, client: TestClient) -> None:
        _seed(client)
        snapshot = client.get("/v1/export/json").json()["data"]
        response = client.post(
            "/v1/export/import",
            json={"customers": snapshot["customers"], "deliveries": snapshot["deliveries"]},
        )
        assert response.status_code == 200
        assert response.json()["data"] == {"imported": 0, "updated": 3, "errors": 0}

    def test_partial_failure(self, client: TestClient, db_session: Session) -> None:
        response = client.post(
            "/v1/export/import",
            json={
                "customers": [
                    {"id": str(uuid.uuid4()), "name": "Bob", "rate_per_litre": "40"},
                    {"name": "X", "rate_per_litre": "40"},
                ],
                "deliveries": [
                    {"delivery_date": "2024-03-01", "status": "delivered", "quantity": "1"},
                    {"delivery_date": "2024-03-02", "status": "spilled"},
                    {
                        "customer_id": str(uuid.uuid4()),
                        "delivery_date": "2024-03-03",
                        "status": "delivered",
                    },
                ],
            },
        )
        assert response.status_code == 200
        assert response.json()["data"] == {"imported": 2, "updated": 0, "errors": 3}

        db_session.expire_all()
        assert db_session.query(Customer).count() == 1
        assert db_session.query(Delivery).count() == 1

    def test_remaps_exported_customer_ids(self, client: TestClient, db_session: Session) -> None:
        old_id = str(uuid.uuid4())
        response = client.post(
            "/v1/export/import",
            json={
                "customers": [{"id": old_id, "name": "Carol", "rate_per_litre": "45"}],
                "deliveries": [
                    {
                        "customer_id": old_id,
                        "delivery_date": "2024-03-01",
                        "status": "delivered",
                        "quantity": "2",
                    }
                ],
            },
        )
        assert response.json()["data"] == {"imported": 2, "updated": 0, "errors": 0}

        db_session.expire_all()
        carol = db_session.query(Customer).filter(Customer.name == "Carol").one()
        delivery = db_session.query(Delivery).one()
        assert delivery.customer_id == carol.id
        assert delivery.rate_per_litre is None
        assert delivery.quantity == Decimal("2")

    def test_existing_customer_reference_kept(self, client: TestClient) -> None:
        customer = _seed(client)
        response = client.post(
            "/v1/export/import",
            json={
                "deliveries": [
                    {
                        "customer_id": customer["id"],
                        "delivery_date": "2024-01-01",
                        "status": "absent",
                    }
                ],
            },
        )
        assert response.json()["data"] == {"imported": 0, "updated": 1, "errors": 0}

    def test_non_object_entries_counted_as_errors(
        self, client: TestClient, db_session: Session
    ) -> None:
        response = client.post(
            "/v1/export/import",
            json={
                "customers": [42, {"name": "Dave", "rate_per_litre": "48"}],
                "deliveries": [
                    {"delivery_date": "2024-04-01", "status": "delivered", "quantity": "1"},
                    "garbage",
                    None,
                ],
            },
        )
        assert response.status_code == 200
        assert response.json()["data"] == {"imported": 2, "updated": 0, "errors": 3}

        db_session.expire_all()
        assert db_session.query(Customer).one().name == "Dave"
        assert db_session.query(Delivery).count() == 1

    def test_missing_deliveries_key_returns_422(self, client: TestClient) -> None:
        assert client.post("/v1/export/import", json={"customers": []}).status_code == 422
