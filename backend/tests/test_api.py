"""Application-level endpoint and error envelope tests."""

from fastapi.testclient import TestClient


def test_root(anon_client: TestClient) -> None:
    response = anon_client.get("/")
    assert response.status_code == 200
    assert response.json() == {"app": "milkbook", "version": "0.1.0", "status": "running"}


def test_health(anon_client: TestClient) -> None:
    response = anon_client.get("/health")
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_unknown_route_uses_envelope(anon_client: TestClient) -> None:
    response = anon_client.get("/v1/nowhere")
    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["error"] == "Not Found"


def test_validation_error_uses_envelope(client: TestClient) -> None:
    response = client.post("/v1/customers", json={"name": "A"})
    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Validation error"
    assert isinstance(body["data"], list)


def test_openapi_lists_resources(anon_client: TestClient) -> None:
    paths = anon_client.get("/openapi.json").json()["paths"]
    for path in (
        "/v1/auth/register",
        "/v1/customers",
        "/v1/deliveries",
        "/v1/summary/{month_year}",
        "/v1/analytics",
        "/v1/bill",
        "/v1/bill/pdf",
        "/v1/export/csv",
        "/v1/export/import",
    ):
        assert path in paths
