"""Async HTTP client for the hosted generative-AI API.

WHY: The app's lesson text and narrated speech come from a hosted
generative-AI service. The browser reaches it only through our proxy so
the API key stays on the server. This module is the proxy's upstream
side: it adds authentication and forwards request bodies verbatim.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. UpstreamClient is an
async context manager: enter it to get an authenticated client, exit to
close the connection pool. Two calls are proxied:
  create_response       : POST /responses with a JSON body
  exchange_realtime_sdp : POST /realtime?model=... with an SDP offer
GenerateClient does the same for the Gemini API:
  generate_content      : POST /models/{model}:generateContent

RULES:
- Always use the async context manager (async with UpstreamClient(...) as client:)
- api_key defaults to load_api_key() / load_gemini_key() (ValueError when unset)
- Responses bodies must name a model in ALLOWED_RESPONSE_MODELS
- Generate bodies must name a model; it goes in the path, not the payload
- A blank realtime model falls back to DEFAULT_REALTIME_MODEL
- SDP exchange raises UpstreamAPIError on a non-2xx answer
- Transport failures propagate as httpx.HTTPError
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

import httpx

from tts_pacer.api.models import UpstreamReply
from tts_pacer.config import (
    ALLOWED_RESPONSE_MODELS,
    DEFAULT_REALTIME_MODEL,
    GEMINI_BASE_URL,
    OPENAI_BASE_URL,
    load_api_key,
    load_gemini_key,
)

logger = logging.getLogger(__name__)

_MODEL_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class UpstreamAPIError(Exception):
    """Raised when the upstream API returns an error the caller must not relay.

    RULES:
    - Always include status_code and message
    - message is the response body text or a summary
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Upstream API error {status_code}: {message}")


class ModelNotAllowedError(ValueError):
    """Raised when a Responses body is missing its model or names a disallowed one."""


def validate_response_model(body: Dict[str, Any]) -> str:
    """Return the body's model name, raising ModelNotAllowedError if unusable."""
    model = str(body.get("model") or "").strip()
    if not model:
        raise ModelNotAllowedError("Missing 'model' in request body.")
    if model not in ALLOWED_RESPONSE_MODELS:
        raise ModelNotAllowedError(
            "Model '{}' not allowed. Allowed: {}".format(
                model, ", ".join(sorted(ALLOWED_RESPONSE_MODELS))
            )
        )
    return model


def validate_generate_model(body: Dict[str, Any]) -> str:
    """Return the model named by a generate body.

    The name becomes part of the upstream URL path, so anything other
    than letters, digits, '.', '_' and '-' is rejected.
    """
    model = str(body.get("model") or "").strip()
    if not model:
        raise ModelNotAllowedError("Missing 'model' in request body.")
    if not _MODEL_NAME_RE.match(model):
        raise ModelNotAllowedError("Invalid model name '{}'.".format(model))
    return model


class _AsyncAPIClient:
    """Shared httpx plumbing: auth headers, timeouts, context management."""

    def __init__(
        self,
        base_url: str,
        auth_headers: Dict[str, str],
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._auth_headers = auth_headers
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._auth_headers,
            timeout=httpx.Timeout(60.0, connect=10.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            name = type(self).__name__
            raise RuntimeError(
                "{0} must be used as an async context manager: "
                "async with {0}() as client: ...".format(name)
            )
        return self._client


class GenerateClient(_AsyncAPIClient):
    """Async client for the Gemini generateContent passthrough.

    RULES:
    - Use as: async with GenerateClient() as client: ...
    - The key travels in the x-goog-api-key header, never in the URL
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(
            base_url or GEMINI_BASE_URL,
            {"x-goog-api-key": api_key or load_gemini_key()},
            transport,
        )

    async def generate_content(self, body: Dict[str, Any]) -> UpstreamReply:
        """Forward a generate body; everything but ``model`` is the payload.

        Raises:
            ModelNotAllowedError: model missing or not a plain model name.
            httpx.HTTPError: the upstream could not be reached.
        """
        model = validate_generate_model(body)
        payload = {key: value for key, value in body.items() if key != "model"}
        client = self._ensure_client()
        resp = await client.post(
            "/models/{}:generateContent".format(model),
            json=payload,
            headers={"Accept": "application/json"},
        )
        return UpstreamReply.from_response(resp, "application/json")


class UpstreamClient(_AsyncAPIClient):
    """Async client for the proxied upstream endpoints.

    RULES:
    - Use as: async with UpstreamClient() as client: ...
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(
            base_url or OPENAI_BASE_URL,
            {"Authorization": "Bearer {}".format(api_key or load_api_key())},
            transport,
        )

    async def create_response(self, body: Dict[str, Any]) -> UpstreamReply:
        """Forward a Responses API request body.

        The upstream status and body are returned as-is, including 4xx/5xx,
        so the proxy can relay validation errors to the caller.

        Raises:
            ModelNotAllowedError: model missing or not in ALLOWED_RESPONSE_MODELS.
            httpx.HTTPError: the upstream could not be reached.
        """
        validate_response_model(body)
        client = self._ensure_client()
        resp = await client.post(
            "/responses",
            json=body,
            headers={"Accept": "application/json"},
        )
        return UpstreamReply.from_response(resp, "application/json")

    async def exchange_realtime_sdp(
        self,
        offer_sdp: str,
        model: Optional[str] = None,
    ) -> str:
        """Send an SDP offer for a realtime speech session and return the answer SDP.

        Raises:
            ValueError: offer_sdp is empty.
            UpstreamAPIError: upstream answered with a non-2xx status.
            httpx.HTTPError: the upstream could not be reached.
        """
        if not offer_sdp or not offer_sdp.strip():
            raise ValueError("Missing SDP offer.")
        client = self._ensure_client()
        resp = await client.post(
            "/realtime",
            params={"model": (model or "").strip() or DEFAULT_REALTIME_MODEL},
            content=offer_sdp.encode("utf-8"),
            headers={"Content-Type": "application/sdp"},
        )
        if resp.status_code not in (200, 201):
            logger.error("Realtime upstream non-OK: %s %s", resp.status_code, resp.text)
            raise UpstreamAPIError(resp.status_code, resp.text or "Upstream error.")
        return resp.text
