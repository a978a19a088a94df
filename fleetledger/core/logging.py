"""JSON logging for the ledger service.

Each record is one JSON object per line. Ledger identifiers passed through
``extra=`` (``expense_id``, ``vehicle_id``, ...) become top-level keys so a
single expense can be traced from the HTTP request to the DAL write.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Dict

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

REQUEST_ID_HEADER = "X-Request-ID"
# Client supplied ids longer than this are replaced with a fresh uuid.
MAX_REQUEST_ID_LENGTH = 64

CONTEXT_FIELDS = (
    "expense_id",
    "vehicle_id",
    "method",
    "path",
    "status",
    "duration_ms",
)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get() or "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "request_id": getattr(record, "request_id", "-"),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def init_logging(debug: bool = False) -> None:
    level = logging.DEBUG if debug else logging.INFO
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)


def _incoming_request_id(request) -> str:
    rid = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
    if rid and len(rid) <= MAX_REQUEST_ID_LENGTH and rid.isprintable():
        return rid
    return str(uuid.uuid4())


async def request_context_middleware(request, call_next):  # type: ignore
    rid = _incoming_request_id(request)
    token = request_id_ctx.set(rid)
    logger = logging.getLogger("fleetledger.request")
    started = time.perf_counter()
    try:
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        logger.info(
            "request completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return response
    finally:
        request_id_ctx.reset(token)
