from fastapi.testclient import TestClient
from main import app

client = TestClient(app)

def test_health_check():
    """
    Tests the /api/health liveness endpoint.
    """
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}

def test_cors_allows_any_origin_by_default():
    response = client.get("/api/health", headers={"Origin": "http://localhost:5173"})
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
