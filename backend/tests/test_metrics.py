from backend import metrics


def setup_function():
    # reset metrics before each test
    metrics.reset_all()


def test_metrics_endpoint_counts_counter_operations(client):
    r = client.get("/api/metrics")
    assert r.status_code == 200
    assert isinstance(r.json(), dict)

    r = client.post("/api/counters", json={"value": 1})
    assert r.status_code == 200
    cid = r.json()["id"]
    assert client.post(f"/api/counters/{cid}/increment").status_code == 200
    assert client.post(f"/api/counters/{cid}/increment").status_code == 200
    assert client.post("/api/counters/999999/decrement").status_code == 404

    data = client.get("/api/metrics").json()
    assert data.get("counter_create") == 1
    assert data.get("counter_increment") == 2
    assert data.get("counter_not_found") == 1
    assert "counter_decrement" not in data


def test_reset_all_clears_counts():
    metrics.inc("counter_reset", 3)
    assert metrics.get("counter_reset") == 3
    metrics.reset_all()
    assert metrics.get_all() == {}
