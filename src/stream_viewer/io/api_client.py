"""HTTP client for the stream inspection API.

All calls are blocking and must run off the UI event loop (see
stream_viewer.tui.scheduling.WorkerRunner). The request timeout is owned
here; the navigation core never imposes one.

// [LAW:single-enforcer] HTTP status -> error taxonomy mapping happens only in _get_json.
"""

import json
import logging
import ssl
import time
import urllib.error
import urllib.parse
import urllib.request

import truststore

from stream_viewer.core.errors import NetworkError, NotFound
from stream_viewer.core.model import (
    Connection,
    Message,
    StreamBounds,
    StreamRef,
    VHost,
    validate_offset,
    validate_page_size,
)

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8080"
DEFAULT_API_PREFIX = "/api"
DEFAULT_TIMEOUT_S = 10.0


def _server_message(body: bytes, fallback: str) -> str:
    """Extract the server's ``error: details`` message from an error body."""
    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        text = body.decode("utf-8", errors="replace").strip()
        return text or fallback
    if not isinstance(payload, dict):
        return fallback
    error = str(payload.get("error", "") or "").strip()
    details = str(payload.get("details", "") or "").strip()
    if error and details:
        return f"{error}: {details}"
    return error or details or fallback


def stream_path(ref: StreamRef, leaf: str) -> str:
    """``/streams/{connection}/{vhost}/{name}/{leaf}`` with each segment escaped."""
    segments = (ref.connection_id, ref.vhost, ref.name)
    quoted = "/".join(urllib.parse.quote(segment, safe="") for segment in segments)
    return f"/streams/{quoted}/{leaf}"


class StreamApiClient:
    """Read-only client for the stream inspection endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        api_prefix: str = DEFAULT_API_PREFIX,
        timeout: float = DEFAULT_TIMEOUT_S,
    ):
        self.base_url = str(base_url or DEFAULT_API_URL).rstrip("/")
        prefix = str(api_prefix or "").strip("/")
        self.api_url = f"{self.base_url}/{prefix}" if prefix else self.base_url
        self.timeout = timeout

    # ─── Collaborator contract ────────────────────────────────────────

    def get_stream_bounds(self, ref: StreamRef) -> StreamBounds:
        payload = self._get_json(self.api_url + stream_path(ref, "stats"))
        return StreamBounds.from_wire(payload)

    def get_messages(self, ref: StreamRef, offset: int, limit: int) -> list[Message]:
        validate_offset(offset)
        validate_page_size(limit)
        query = urllib.parse.urlencode({"offset": offset, "limit": limit})
        payload = self._get_json(f"{self.api_url}{stream_path(ref, 'messages')}?{query}")
        if not isinstance(payload, dict):
            raise NetworkError("malformed messages response")
        # // [LAW:dataflow-not-control-flow] Missing/null list is the empty page, not an error.
        entries = payload.get("messages") or []
        if not isinstance(entries, list):
            raise NetworkError("malformed messages response")
        return [Message.from_wire(entry) for entry in entries]

    # ─── Stream picker ─────────────────────────────────────────────────

    def list_vhosts(self) -> list[VHost]:
        payload = self._get_json(self.api_url + "/vhosts")
        if not isinstance(payload, list):
            raise NetworkError("malformed vhosts response")
        return [VHost.from_wire(entry) for entry in payload if isinstance(entry, dict)]

    def list_connections(self) -> list[Connection]:
        payload = self._get_json(self.api_url + "/connections")
        if not isinstance(payload, list):
            raise NetworkError("malformed connections response")
        return [Connection.from_wire(entry) for entry in payload if isinstance(entry, dict)]

    def list_streams(self) -> list[StreamRef]:
        payload = self._get_json(self.api_url + "/streams")
        if not isinstance(payload, list):
            raise NetworkError("malformed streams response")
        return [StreamRef.from_wire(entry) for entry in payload if isinstance(entry, dict)]

    def health(self) -> bool:
        payload = self._get_json(self.base_url + "/health")
        return isinstance(payload, dict) and payload.get("status") == "ok"

    # ─── Transport ─────────────────────────────────────────────────────

    def _get_json(self, url: str) -> object:
        request = urllib.request.Request(
            url,
            headers={"accept": "application/json"},
            method="GET",
        )
        started = time.monotonic()
        try:
            ctx = truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
            response = urllib.request.urlopen(request, context=ctx, timeout=self.timeout)
            body = response.read()
        except urllib.error.HTTPError as e:
            message = _server_message(e.read() or b"", f"HTTP {e.code} {e.reason}")
            logger.debug("GET %s -> %s (%s)", url, e.code, message)
            if e.code == 404:
                raise NotFound(message) from e
            raise NetworkError(message, status=e.code) from e
        except urllib.error.URLError as e:
            raise NetworkError(f"cannot reach {self.base_url}: {e.reason}") from e
        except (OSError, ValueError) as e:
            raise NetworkError(f"request to {self.base_url} failed: {e}") from e

        elapsed_ms = (time.monotonic() - started) * 1000
        logger.debug("GET %s -> 200 in %.0fms (%d bytes)", url, elapsed_ms, len(body))
        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise NetworkError(f"undecodable response from {url}: {e}") from e
