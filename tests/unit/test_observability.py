from __future__ import annotations

import json
import logging

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from pollster.obs import AuditMiddleware, PrometheusMiddleware, metrics_router


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record.getMessage())


def test_metrics_endpoint_exposes_counters() -> None:
    app = FastAPI()
    app.add_middleware(PrometheusMiddleware)
    app.include_router(metrics_router)

    @app.get("/items/{item_id}")
    def read_item(item_id: int) -> dict[str, int]:
        return {"item_id": item_id}

    client = TestClient(app)
    client.get("/items/5")
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "http_requests_total" in response.text
    assert 'path="/items/{item_id}"' in response.text
    assert "entity_version_bumps_total" in response.text
    assert "authorization_denials_total" in response.text


def test_audit_middleware_masks_sensitive_fields() -> None:
    logger = logging.getLogger("audit.test")
    logger.propagate = False
    handler = _ListHandler()
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

    app = FastAPI()
    app.add_middleware(AuditMiddleware, logger=logger)

    @app.post("/signup")
    async def signup(request: Request) -> dict[str, str]:
        request.state.user_id = 11
        payload = await request.json()
        return {"nickname": payload["nickname"]}

    response = TestClient(app).post(
        "/signup",
        json={"nickname": "ada", "phone": "+15550001234", "email": "ada@example.com", "password": "hunter22"},
        headers={"X-Request-ID": "req-1"},
    )

    assert response.status_code == 200
    assert response.json() == {"nickname": "ada"}
    assert response.headers["X-Request-ID"] == "req-1"

    record = json.loads(handler.records[-1])
    assert record["request_id"] == "req-1"
    assert record["actor"] == 11
    assert record["status"] == 200
    assert record["body"]["nickname"] == "ada"
    assert record["body"]["password"] == "***"
    assert record["body"]["phone"] == "***1234"
    assert "ada@example.com" not in json.dumps(record)
