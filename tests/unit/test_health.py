from fastapi.testclient import TestClient
from regview.main import app

def test_health_check():
    client = TestClient(app)
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": 200, "message": "Up and running", "data": None}
