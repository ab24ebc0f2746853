"""JSON HTTP API for PhishLedger."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

from aiohttp import web

from ..reporter.base import OperationResult, ResultStatus
from ..reporter.service import ReportService

logger = logging.getLogger(__name__)

# Error kind -> HTTP status. Unknown kinds fall back to 500.
ERROR_STATUS = {
    "invalid_input": 400,
    "unauthorized": 403,
    "not_found": 404,
    "ledger_rejected": 422,
    "internal_error": 500,
    "corrupt_data": 502,
    "classification_unavailable": 503,
    "ledger_unavailable": 503,
    "configuration_error": 503,
    "ledger_timeout": 504,
}

CORS_METHODS = "GET, POST, PATCH, DELETE, OPTIONS"
CORS_HEADERS = "Content-Type, Authorization"


def http_status_for(result: OperationResult) -> int:
    if result.status == ResultStatus.SUCCESS:
        return 200
    if result.status == ResultStatus.PARTIAL:
        return 207
    return ERROR_STATUS.get(result.error_kind or "", 500)


class ApiServer:
    """Serves the report submission, listing and verification endpoints."""

    def __init__(
        self,
        service: ReportService,
        *,
        host: str = "0.0.0.0",
        port: int = 3000,
        cors_origin: str = "http://localhost:5173",
        status_provider: Optional[Callable[[], dict]] = None,
    ):
        self.service = service
        self.host = host
        self.port = port
        self.cors_origin = cors_origin
        self.status_provider = status_provider

        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

        self._app = web.Application(middlewares=[self._cors_middleware])
        self._register_routes()

    @property
    def app(self) -> web.Application:
        return self._app

    def _register_routes(self) -> None:
        self._app.router.add_get("/healthz", self._healthz)
        self._app.router.add_post("/submitReport", self._submit_report)
        self._app.router.add_post("/submitUserReport", self._submit_user_report)
        self._app.router.add_get("/reports", self._list_reports)
        self._app.router.add_post("/verifyReport", self._verify_report)
        self._app.router.add_post("/rejectReport", self._reject_report)

    async def start(self) -> None:
        if self._runner:
            return
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, host=self.host, port=int(self.port))
        await self._site.start()
        logger.info("API server listening on %s:%s", self.host, self.port)

    async def stop(self) -> None:
        if self._site:
            await self._site.stop()
        if self._runner:
            await self._runner.cleanup()
        self._runner = None
        self._site = None

    def _cors_headers(self) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.cors_origin,
            "Access-Control-Allow-Methods": CORS_METHODS,
            "Access-Control-Allow-Headers": CORS_HEADERS,
            "Access-Control-Allow-Credentials": "true",
            "Vary": "Origin",
        }

    @web.middleware
    async def _cors_middleware(self, request: web.Request, handler):  # type: ignore[override]
        # Preflight requests are answered here for every route.
        if request.method == "OPTIONS":
            return web.Response(status=204, headers=self._cors_headers())
        try:
            response = await handler(request)
        except web.HTTPException as exc:
            exc.headers.update(self._cors_headers())
            raise
        response.headers.update(self._cors_headers())
        return response

    def _respond(self, result: OperationResult) -> web.Response:
        return web.json_response(result.to_dict(), status=http_status_for(result))

    async def _read_body(self, request: web.Request, operation: str) -> dict | OperationResult:
        """Parse a JSON object body, or return a failed result describing why not."""
        try:
            data = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.info("%s: malformed JSON body: %s", operation, exc)
            data = None
        if not isinstance(data, dict):
            return OperationResult(
                operation=operation,
                status=ResultStatus.FAILED,
                message="Request body must be a JSON object",
                error={"kind": "invalid_input", "message": "Request body must be a JSON object"},
            )
        return data

    async def _healthz(self, request: web.Request) -> web.Response:
        payload: dict[str, Any] = {"ok": True}
        if self.status_provider:
            try:
                payload.update(self.status_provider() or {})
            except Exception as exc:
                logger.warning("Health status provider failed: %s", exc)
                payload = {"ok": False, "message": str(exc)}
        return web.json_response(payload)

    async def _submit_report(self, request: web.Request) -> web.Response:
        body = await self._read_body(request, "submit_accusation_report")
        if isinstance(body, OperationResult):
            return self._respond(body)
        result = await self.service.submit_accusation_report(body.get("url"), body.get("accusedWallet"))
        return self._respond(result)

    async def _submit_user_report(self, request: web.Request) -> web.Response:
        body = await self._read_body(request, "submit_self_report")
        if isinstance(body, OperationResult):
            return self._respond(body)
        result = await self.service.submit_self_report(body.get("url"), body.get("userWallet"))
        return self._respond(result)

    async def _list_reports(self, request: web.Request) -> web.Response:
        return self._respond(await self.service.list_reports())

    async def _verify_report(self, request: web.Request) -> web.Response:
        body = await self._read_body(request, "verify_report")
        if isinstance(body, OperationResult):
            return self._respond(body)
        return self._respond(await self.service.verify_report(body.get("reportId")))

    async def _reject_report(self, request: web.Request) -> web.Response:
        body = await self._read_body(request, "reject_report")
        if isinstance(body, OperationResult):
            return self._respond(body)
        return self._respond(await self.service.reject_report(body.get("reportId")))
