"""HTTP surface: timers, uploads, done, stats, webhook, error contract."""

import logging

from sketch_time.core.dates import epoch_ms
from sketch_time.core.errors import StorageError


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_readyz_reports_store_and_timers(client):
    client.post("/start-timer", json={"user_id": 1, "duration": 10})
    body = client.get("/readyz").json()
    assert body["status"] == "ok"
    assert body["store"] == "memory"
    assert body["active_timers"] == 1


def test_start_then_get_timer(client, clock):
    resp = client.post("/start-timer", json={"user_id": 1, "duration": 15})
    assert resp.status_code == 200
    started = resp.json()
    assert started["success"] is True
    assert started["start_time"] == epoch_ms(clock())
    assert started["end_time"] - started["start_time"] == 15 * 60_000

    clock.advance(minutes=5)
    timer = client.get("/timer/1").json()
    assert timer == {
        "has_active_timer": True,
        "duration": 15,
        "start_time": started["start_time"],
        "end_time": started["end_time"],
        "remaining_ms": 10 * 60_000,
        "is_expired": False,
    }


def test_get_timer_absent(client):
    assert client.get("/timer/1").json() == {"has_active_timer": False}


def test_elapsed_timer_reads_expired(client, clock):
    client.post("/start-timer", json={"user_id": 1, "duration": 1})
    clock.advance(minutes=2)
    timer = client.get("/timer/1").json()
    assert timer["is_expired"] is True
    assert timer["remaining_ms"] == 0


def test_cancel_timer_completes_session(client, store):
    client.post("/start-timer", json={"user_id": 1, "duration": 15})
    resp = client.post("/cancel-timer", json={"user_id": 1})
    assert resp.json() == {"success": True, "cancelled": True}
    assert client.get("/timer/1").json() == {"has_active_timer": False}
    assert len(store.list_completed_sessions(1)) == 1


def test_cancel_reports_storage_failure(client, store, monkeypatch):
    def broken(user_id, day):
        raise StorageError("Failed to mark session complete")

    client.post("/start-timer", json={"user_id": 1, "duration": 15})
    monkeypatch.setattr(store, "record_session_complete", broken)

    resp = client.post("/cancel-timer", json={"user_id": 1})
    assert resp.status_code == 500
    assert resp.json()["error"]["code"] == "storage_failure"


def test_cancel_absent_timer_succeeds(client):
    resp = client.post("/cancel-timer", json={"user_id": 1})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "cancelled": False}


def test_done_before_upload_is_rejected(client):
    resp = client.post("/done", json={"user_id": 1})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"]["code"] == "no_upload_yet"
    assert body["error"]["request_id"] == resp.headers["x-request-id"]
    assert client.get("/stats/1").json()["current_streak"] == 0


def test_upload_then_done(client):
    client.post("/start-timer", json={"user_id": 1, "duration": 15})
    upload = client.post("/upload", json={"user_id": 1, "media_ref": "file-1", "display_name": "ana"})
    assert upload.status_code == 200
    body = upload.json()
    assert body["success"] is True
    assert body["stats"]["current_streak"] == 1
    assert body["stats"]["recent_history"] == [{"date": "2024-03-15", "count": 1}]
    # Upload stops the running timer
    assert client.get("/timer/1").json() == {"has_active_timer": False}

    done = client.post("/done", json={"user_id": 1})
    assert done.status_code == 200
    assert done.json()["stats"]["has_uploaded_today"] is True


def test_stats_across_days(client, clock):
    clock.advance(days=-2)
    client.post("/upload", json={"user_id": 1, "media_ref": "a"})
    clock.advance(days=1)
    client.post("/upload", json={"user_id": 1, "media_ref": "b"})
    clock.advance(days=1)

    stats = client.get("/stats/1").json()
    assert stats["current_streak"] == 2
    assert stats["longest_streak"] == 2
    assert stats["has_uploaded_today"] is False
    assert stats["total_uploads"] == 2


def test_invalid_inputs_use_validation_contract(client):
    cases = [
        client.post("/start-timer", json={"user_id": 1, "duration": 0}),
        client.post("/start-timer", json={"user_id": 1}),
        client.post("/start-timer", json={"user_id": -3, "duration": 5}),
        client.post("/done", json={}),
        client.post("/upload", json={"user_id": 1, "media_ref": ""}),
        client.get("/stats/not-a-number"),
    ]
    for resp in cases:
        assert resp.status_code == 400, resp.text
        assert resp.json()["error"]["code"] == "validation_error"
    assert client.get("/readyz").json()["active_timers"] == 0


def test_telegram_webhook_photo(client, notifier, store):
    update = {
        "update_id": 1,
        "message": {
            "message_id": 2,
            "from": {"id": 77, "username": "ana"},
            "photo": [{"file_id": "p1", "width": 10, "height": 10}],
        },
    }
    resp = client.post("/telegram/webhook", json=update)
    assert resp.json() == {"ok": True, "handled": "photo"}
    assert store.count_uploads(77) == 1
    assert notifier.sent[-1]["user_id"] == 77


def test_request_id_echoed_and_logged(client, caplog):
    with caplog.at_level(logging.INFO, logger="sketch_time"):
        resp = client.get("/healthz", headers={"x-request-id": "rid-123"})
    assert resp.headers["x-request-id"] == "rid-123"
    assert any(getattr(r, "request_id", None) == "rid-123" for r in caplog.records)


def test_unsafe_request_id_is_replaced(client):
    resp = client.get("/healthz", headers={"x-request-id": "bad id with spaces"})
    rid = resp.headers["x-request-id"]
    assert rid != "bad id with spaces"
    assert len(rid) == 36
