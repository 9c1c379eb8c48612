"""
Lightweight HTTP server for the Telegram webhook.

Uses raw asyncio, no web framework, for two routes:

- POST <webhook_path>: run the pipeline, always answer 200 {"ok": true}
- GET /health: liveness probe
"""

import asyncio
import json
import logging
import time
from typing import Any

from tgscribe.pipeline import MessagePipeline

logger = logging.getLogger(__name__)

REASONS = {200: "OK", 400: "Bad Request", 404: "Not Found", 405: "Method Not Allowed"}

# Telegram webhook bodies are small JSON documents
MAX_BODY_SIZE = 1024 * 1024


class WebhookServer:
    """
    Minimal HTTP server exposing the webhook and GET /health.

    Telegram redelivers updates that are not acknowledged with a 2xx,
    so webhook calls are answered with 200 whatever happened inside
    the pipeline. Failures reach the user as chat replies instead.
    """

    def __init__(
        self,
        pipeline: MessagePipeline,
        host: str = "0.0.0.0",
        port: int = 8080,
        webhook_path: str = "/webhook",
    ):
        self._pipeline = pipeline
        self._host = host
        self._port = port
        self._webhook_path = webhook_path
        self._start_time = time.monotonic()
        self._server: asyncio.Server | None = None

    @property
    def port(self) -> int:
        """Bound port (differs from the configured one when that is 0)."""
        if self._server and self._server.sockets:
            return self._server.sockets[0].getsockname()[1]
        return self._port

    def _build_health(self) -> dict[str, Any]:
        """Build the health check response payload."""
        return {
            "status": "ok",
            "uptime_s": round(time.monotonic() - self._start_time, 1),
        }

    async def dispatch(self, method: str, path: str, body: bytes) -> tuple[int, dict[str, Any]]:
        """
        Route a request.

        Returns:
            (HTTP status, JSON payload)
        """
        path = path.split("?", 1)[0]

        if path == "/health" and method == "GET":
            return 200, self._build_health()

        if path != self._webhook_path:
            return 404, {"error": "Not found"}

        if method != "POST":
            return 405, {"error": "Method not allowed"}

        await self._handle_webhook(body)
        return 200, {"ok": True}

    async def _handle_webhook(self, body: bytes) -> None:
        """Run the pipeline; nothing raised here reaches the HTTP layer."""
        try:
            payload = json.loads(body or b"{}")
            if not isinstance(payload, dict):
                logger.warning("Webhook body is not a JSON object, ignoring")
                return
            await self._pipeline.handle_update(payload)
        except Exception:
            logger.exception("Webhook error")

    async def _handle_request(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        """Handle an incoming HTTP request."""
        try:
            # Read request line
            request_line = await asyncio.wait_for(reader.readline(), timeout=5)
            parts = request_line.decode("utf-8", errors="replace").split()

            # Read headers
            headers: dict[str, str] = {}
            while True:
                line = await asyncio.wait_for(reader.readline(), timeout=5)
                if line in (b"\r\n", b"\n", b""):
                    break
                name, _, value = line.decode("latin-1").partition(":")
                headers[name.strip().lower()] = value.strip()

            if len(parts) < 2:
                status, payload = 400, {"error": "Bad request"}
            else:
                length = int(headers.get("content-length", "0") or 0)
                if length > MAX_BODY_SIZE:
                    status, payload = 400, {"error": "Body too large"}
                else:
                    body = await asyncio.wait_for(reader.readexactly(length), timeout=5) if length else b""
                    status, payload = await self.dispatch(parts[0].upper(), parts[1], body)

            body_out = json.dumps(payload).encode()
            response = (
                f"HTTP/1.1 {status} {REASONS.get(status, 'OK')}\r\n"
                "Content-Type: application/json\r\n"
                f"Content-Length: {len(body_out)}\r\n"
                "Connection: close\r\n"
                "\r\n"
            ).encode() + body_out

            writer.write(response)
            await writer.drain()
        except (asyncio.TimeoutError, asyncio.IncompleteReadError, ConnectionError, ValueError) as e:
            logger.debug(f"Dropped malformed request: {e}")
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass

    async def start(self) -> None:
        """Bind the listening socket."""
        self._start_time = time.monotonic()
        self._server = await asyncio.start_server(
            self._handle_request,
            self._host,
            self._port,
        )
        logger.info(f"Webhook listening on http://{self._host}:{self.port}{self._webhook_path}")

    async def serve_forever(self) -> None:
        """Start (if needed) and serve until cancelled."""
        if self._server is None:
            await self.start()
        assert self._server is not None
        await self._server.serve_forever()

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
