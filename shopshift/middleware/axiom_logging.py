"""Axiom 요청 로깅 미들웨어.

Axiom request logging middleware.
Ships one structured event per API request: method, path, shop, params,
masked JSON body, status code, duration and the ``{"error": ...}`` message
of failed requests. Sensitive keys (token, secret, authorization) are
masked. Without Axiom credentials the middleware is a pass-through.
"""

import json
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from shopshift.config import settings

# 마스킹 대상 키 (Keys whose values are never logged)
_SENSITIVE_KEYS = re.compile(
    r"(password|secret|token|authorization|api_key|apikey|credential|cron)",
    re.IGNORECASE,
)

# 로깅 제외 경로 (Paths never logged)
_SKIP_PATHS: set[str] = {"/health", "/docs", "/redoc", "/openapi.json"}

# 경로에서 매장 ID 추출 (Shop id embedded in shop-scoped paths)
_SHOP_PATH = re.compile(r"/shops/([0-9a-fA-F-]{36})")

_MAX_BODY_CHARS: int = 2000
_MAX_ERROR_CHARS: int = 500


def _mask(data: Any, depth: int = 0) -> Any:
    """민감 키를 재귀적으로 마스킹합니다 (Recursively mask sensitive keys)."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {k: "***" if _SENSITIVE_KEYS.search(k) else _mask(v, depth + 1) for k, v in data.items()}
    if isinstance(data, list):
        return [_mask(item, depth + 1) for item in data[:20]]
    return data


def _clip(value: str, limit: int) -> str:
    return value if len(value) <= limit else value[:limit] + "...(truncated)"


def _error_message(body: bytes) -> str:
    """오류 응답 본문에서 메시지를 추출합니다 (Extract the error message of a failed response)."""
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _clip(body.decode("utf-8", errors="replace"), _MAX_ERROR_CHARS)
    if isinstance(payload, dict):
        message = payload.get("error", payload.get("detail", payload))
    else:
        message = payload
    return _clip(message if isinstance(message, str) else json.dumps(message), _MAX_ERROR_CHARS)


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청을 Axiom으로 보내는 미들웨어.

    Middleware sending one log event per API request to Axiom. Event
    streams (``text/event-stream``) are logged on open without touching
    their body.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET
        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in _SKIP_PATHS or self._client is None:
            return await call_next(request)

        started = time.perf_counter()
        event: dict[str, Any] = {"method": request.method, "path": request.url.path}

        shop_match = _SHOP_PATH.search(request.url.path)
        if shop_match:
            event["shop_id"] = shop_match.group(1)
        if request.query_params:
            event["query_params"] = _mask(dict(request.query_params))

        if request.method in ("POST", "PUT", "PATCH"):
            body_bytes = await request.body()
            if body_bytes:
                try:
                    event["request_body"] = _mask(json.loads(body_bytes))
                except (json.JSONDecodeError, UnicodeDecodeError):
                    event["request_body"] = "(non-json body)"
                if len(json.dumps(event["request_body"])) > _MAX_BODY_CHARS:
                    event["request_body"] = _clip(json.dumps(event["request_body"]), _MAX_BODY_CHARS)

        status_code: int = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            if status_code >= 400:
                body = b""
                async for chunk in response.body_iterator:
                    body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
                event["error"] = _error_message(body)
                # 소비한 본문으로 응답 재구성 (Rebuild the response from the consumed body)
                response = Response(
                    content=body,
                    status_code=status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["status_code"] = status_code
            event["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            try:
                self._client.ingest_events(self._dataset, [event])
            except Exception:
                pass  # 로깅 실패는 요청에 영향 없음 (A logging failure never breaks a request)

        return response
