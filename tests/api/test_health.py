"""
Tests for the health check endpoint.
"""


def test_health_check_returns_200(client):
    """
    Verify the health endpoint responds with HTTP 200.

    If this fails, nothing else will work.
    """
    response = client.get("/health")
    assert response.status_code == 200


def test_health_check_returns_service_name(client):
    response = client.get("/health")
    assert response.json()["service"] == "backoffice-ledger"


def test_health_check_reports_store_status(client):
    """
    The endpoint always reports whether the store answered.
    Monitoring uses this to detect database outages.
    """
    data = client.get("/health").json()
    assert data["store"] in ("healthy", "unhealthy")
    assert data["mode"] == "live"


def test_health_check_on_sandbox(sandbox_client):
    data = sandbox_client.get("/health").json()
    assert data["status"] == "healthy"
