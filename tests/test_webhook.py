from app.models.task import Task
from conftest import FakeResult, entity_handler, make_asset, make_task


def test_processed_event_updates_task(client, fake_db):
    asset = make_asset()
    task = make_task()
    task.asset = asset
    fake_db.on_execute(entity_handler(Task, FakeResult(scalar=task)))

    payload = {"task_id": 1, "s3_key": "output/ad1.mp4", "frames": 300}
    response = client.post("/webhook", json={"event_type": "processed", "payload": payload})

    assert response.status_code == 200
    assert response.json() == {"message": "Event processed successfully"}
    assert task.metadata_ == payload
    assert asset.output_key == "output/ad1.mp4"


def test_processed_event_without_task_id(client, fake_db):
    response = client.post("/webhook", json={"event_type": "processed", "payload": {"s3_key": "x"}})

    assert response.status_code == 400
    assert response.json()["error"] == "task_id not found or invalid in payload"
    assert fake_db.committed is False


def test_processed_event_for_unknown_task(client):
    response = client.post("/webhook", json={"event_type": "processed", "payload": {"task_id": 42}})

    assert response.status_code == 404


def test_other_events_are_acknowledged(client, fake_db):
    response = client.post("/webhook", json={"event_type": "started", "payload": {"task_id": 1}})

    assert response.status_code == 200
    assert fake_db.committed is False


def test_malformed_event_is_rejected(client):
    assert client.post("/webhook", json={"event_type": "  ", "payload": {}}).status_code == 400
    assert client.post("/webhook", json={"payload": {}}).status_code == 400
    assert client.post("/webhook", content=b"not json", headers={"Content-Type": "application/json"}).status_code == 400
