"""
Tests for health endpoints and error responses
"""


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "tourbook-api"}
    assert "X-Process-Time" in response.headers


async def test_liveness(client):
    response = await client.get("/health/live")
    assert response.json() == {"status": "alive"}


async def test_query_validation_errors_are_400(client):
    response = await client.get("/packages", params={"page": 0})

    assert response.status_code == 400
    assert "page" in response.json()["detail"]
