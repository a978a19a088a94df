"""
Tests for JSON log records and request id propagation.
"""

import json
import logging

import pytest

from fleetledger.core.logging import JsonFormatter


class _Collect(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def request_records():
    handler = _Collect()
    logger = logging.getLogger("fleetledger.request")
    logger.addHandler(handler)
    yield handler.records
    logger.removeHandler(handler)


def _record(**extra):
    record = logging.LogRecord(
        "fleetledger.db",
        logging.INFO,
        __file__,
        1,
        "expense added gross=%s",
        (100.0,),
        None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_ledger_ids_become_keys(self):
        line = JsonFormatter().format(_record(expense_id="e-1", vehicle_id="v-1"))

        payload = json.loads(line)
        assert payload["message"] == "expense added gross=100.0"
        assert payload["expense_id"] == "e-1"
        assert payload["vehicle_id"] == "v-1"
        assert payload["request_id"] == "-"

    def test_absent_fields_are_omitted(self):
        payload = json.loads(JsonFormatter().format(_record()))

        assert "expense_id" not in payload
        assert "status" not in payload


class TestRequestMiddleware:
    def test_client_request_id_is_echoed(self, client):
        resp = client.get("/", headers={"X-Request-ID": "trace-42"})

        assert resp.headers["X-Request-ID"] == "trace-42"

    def test_oversized_request_id_replaced(self, client):
        resp = client.get("/", headers={"X-Request-ID": "x" * 500})

        rid = resp.headers["X-Request-ID"]
        assert rid != "x" * 500
        assert len(rid) == 36

    def test_completed_request_logged(self, client, request_records):
        client.get("/reports/summary", headers={"X-Request-ID": "trace-7"})

        done = [r for r in request_records if r.getMessage() == "request completed"]
        assert len(done) == 1
        assert done[0].path == "/reports/summary"
        assert done[0].status == 200
        assert done[0].duration_ms >= 0
