from __future__ import annotations

from fastapi.testclient import TestClient

from voicecall.server import app


def test_health_reports_connected_clients() -> None:
    with TestClient(app) as client:
        root = client.get("/")
        health = client.get("/health")

    assert root.status_code == 200
    assert root.json()["websocket"] == "/ws"
    body = health.json()
    assert body["status"] == "ok"
    assert body["connected_clients"] == 0
    assert isinstance(body["timestamp"], float)


def test_websocket_call_start_round_trip() -> None:
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "call_start"})
            started = ws.receive_json()
            assert started["type"] == "call_started"
            assert started["payload"]["session_id"] == started["session_id"]

            ws.send_json({"type": "call_end"})
            ended = ws.receive_json()
            assert ended["type"] == "call_ended"
            assert ended["payload"]["reason"] == "client_request"
