"""FastAPI application: pacing endpoints plus the upstream AI proxy.

WHY: The web client needs word timings, highlight parts and exports for
texts it is about to narrate, and it needs to reach the hosted
generative-AI API without ever holding the API key. One small service
covers both.

HOW: A single FastAPI app exposes endpoints grouped by tags. Pacing
endpoints are pure: they build a Narration and serialise it. Proxy
endpoints open an UpstreamClient (or GenerateClient) per request and
relay the upstream answer. CORS is restricted to the configured origins.

RULES:
- All endpoints have OpenAPI descriptions on every response
- Error responses use a consistent ErrorResponse schema
- Pacing endpoints never fail on odd text or unknown languages
- /responses rejects bodies without an allowed model (400)
- /generate rejects bodies without a plain model name (400)
- Upstream transport failures map to 502, a missing API key to 503
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from tts_pacer import __version__
from tts_pacer.api.client import (
    GenerateClient,
    ModelNotAllowedError,
    UpstreamAPIError,
    UpstreamClient,
    validate_generate_model,
    validate_response_model,
)
from tts_pacer.config import (
    CORS_ORIGINS,
    api_key_configured,
    gemini_key_configured,
    load_pacing_config,
)
from tts_pacer.core.ir import Narration
from tts_pacer.core.timing import build_narration
from tts_pacer.formatters import FORMATTERS
from tts_pacer.rendering import highlight_parts, karaoke_parts
from tts_pacer.server.models import (
    ErrorResponse,
    ExportRequest,
    FormatInfo,
    HealthResponse,
    HighlightMode,
    HighlightRequest,
    HighlightResponse,
    NarrationRequest,
    NarrationResponse,
    PartModel,
    RealtimeOffer,
    TimedWordModel,
)

logger = logging.getLogger(__name__)

pacing_config = load_pacing_config()

app = FastAPI(
    title="TTS Word Pacer API",
    description=(
        "Estimated word timings and highlight parts for narrated lesson "
        "text, word-level exports (JSON, SRT, WebVTT), and an authenticated "
        "passthrough to the hosted generative-AI API."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _narration_to_response(narration: Narration) -> NarrationResponse:
    return NarrationResponse(
        text=narration.text,
        language=narration.language,
        ms_per_char=pacing_config.ms_per_char(narration.language),
        total_words=narration.total_words,
        duration_ms=narration.duration_ms,
        startup_delay_ms=pacing_config.startup_delay_ms,
        words=[
            TimedWordModel(
                text=w.text,
                index=w.index,
                start_offset=w.start_offset,
                end_offset=w.end_offset,
                start_ms=w.start_ms,
                end_ms=w.end_ms,
            )
            for w in narration.words
        ],
    )


def _open_upstream() -> UpstreamClient:
    """Create an UpstreamClient, mapping a missing key to 503."""
    try:
        return UpstreamClient()
    except ValueError as exc:
        logger.error("Upstream proxy called without an API key")
        raise HTTPException(status_code=503, detail=str(exc))


def _open_generate() -> GenerateClient:
    """Create a GenerateClient, mapping a missing key to 503."""
    try:
        return GenerateClient()
    except ValueError as exc:
        logger.error("Generate proxy called without an API key")
        raise HTTPException(status_code=503, detail=str(exc))


async def _read_json_object(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except (ValueError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Request body must be JSON.")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object.")
    return body


# ---------------------------------------------------------------------------
# Endpoints: Pacing
# ---------------------------------------------------------------------------


@app.post(
    "/timings",
    response_model=NarrationResponse,
    tags=["pacing"],
    summary="Estimate word timings",
    description=(
        "Split the text into words and estimate when each is spoken, "
        "using the language's milliseconds-per-character rate."
    ),
)
async def create_timings(request: NarrationRequest) -> NarrationResponse:
    narration = build_narration(request.text, request.language, pacing_config)
    return _narration_to_response(narration)


@app.post(
    "/highlight",
    response_model=HighlightResponse,
    tags=["pacing"],
    summary="Split text into highlight parts",
    description=(
        "Return parts covering the whole text with the current word "
        "highlighted. Out-of-range indices highlight nothing."
    ),
)
async def create_highlight(request: HighlightRequest) -> HighlightResponse:
    if request.mode == HighlightMode.karaoke:
        parts = karaoke_parts(request.text, request.current_index)
    else:
        parts = highlight_parts(request.text, request.current_index)
    return HighlightResponse(
        total_words=sum(1 for p in parts if p.type == "word"),
        parts=[
            PartModel(
                type=p.type,
                content=p.content,
                index=getattr(p, "index", None),
                is_highlighted=getattr(p, "is_highlighted", False),
                is_spoken=getattr(p, "is_spoken", False),
            )
            for p in parts
        ],
    )


# ---------------------------------------------------------------------------
# Endpoints: Exports
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["exports"],
    summary="List available export formats",
    description="Returns all export formats with their identifiers, names, and file suffixes.",
)
async def list_formats() -> List[FormatInfo]:
    empty = build_narration("", "", pacing_config)
    result = []
    for key, formatter_cls in sorted(FORMATTERS.items()):
        formatter = formatter_cls()
        outputs = formatter.format(empty)
        result.append(FormatInfo(
            key=key,
            name=formatter.name,
            suffix=outputs[0].suffix if outputs else "",
        ))
    return result


@app.post(
    "/exports",
    tags=["exports"],
    summary="Render one export",
    description="Pace the text and return it in the requested export format as a download.",
    responses={
        400: {"model": ErrorResponse, "description": "Unknown export format"},
    },
)
async def create_export(request: ExportRequest) -> Response:
    key = request.format.strip()
    if key not in FORMATTERS:
        raise HTTPException(
            status_code=400,
            detail="Unknown export format '{}'. Available: {}".format(
                key, ", ".join(sorted(FORMATTERS.keys()))
            ),
        )

    narration = build_narration(request.text, request.language, pacing_config)
    output = FORMATTERS[key]().format(narration)[0]
    filename = "narration{}".format(output.suffix)
    return Response(
        content=output.content,
        media_type=output.media_type,
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(filename)},
    )


# ---------------------------------------------------------------------------
# Endpoints: Upstream proxy
# ---------------------------------------------------------------------------


@app.post(
    "/responses",
    tags=["proxy"],
    summary="Proxy a Responses API request",
    description=(
        "Forward the JSON body to the upstream Responses API with the "
        "server-held key. The upstream status and body are relayed unchanged."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid JSON or model not allowed"},
        502: {"model": ErrorResponse, "description": "Upstream unreachable"},
        503: {"model": ErrorResponse, "description": "Upstream API key not configured"},
    },
)
async def proxy_responses(request: Request) -> Response:
    body = await _read_json_object(request)
    try:
        validate_response_model(body)
    except ModelNotAllowedError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        async with _open_upstream() as client:
            reply = await client.create_response(body)
    except httpx.HTTPError:
        logger.exception("Responses upstream fetch failed")
        raise HTTPException(status_code=502, detail="Responses upstream error.")

    return Response(
        content=reply.content,
        status_code=reply.status_code,
        media_type=reply.content_type,
    )


@app.post(
    "/generate",
    tags=["proxy"],
    summary="Proxy a Gemini generateContent request",
    description=(
        "Body is {model, ...payload}. The payload (everything but model) is "
        "forwarded to models/{model}:generateContent with the server-held "
        "key; the upstream status and body are relayed unchanged."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid JSON or model name"},
        502: {"model": ErrorResponse, "description": "Upstream unreachable"},
        503: {"model": ErrorResponse, "description": "Gemini API key not configured"},
    },
)
async def proxy_generate(request: Request) -> Response:
    body = await _read_json_object(request)
    try:
        validate_generate_model(body)
    except ModelNotAllowedError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        async with _open_generate() as client:
            reply = await client.generate_content(body)
    except httpx.HTTPError:
        logger.exception("Generate upstream fetch failed")
        raise HTTPException(status_code=502, detail="Generate upstream error.")

    return Response(
        content=reply.content,
        status_code=reply.status_code,
        media_type=reply.content_type,
    )


@app.post(
    "/realtime/sdp",
    tags=["proxy"],
    summary="Exchange a realtime speech SDP offer",
    description=(
        "Accepts a raw SDP offer (Content-Type: application/sdp) or JSON "
        "{sdp, model}. Returns the upstream SDP answer as application/sdp."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Missing SDP offer"},
        502: {"model": ErrorResponse, "description": "Upstream error"},
        503: {"model": ErrorResponse, "description": "Upstream API key not configured"},
    },
)
async def exchange_realtime_sdp(request: Request) -> Response:
    content_type = request.headers.get("content-type", "").lower()
    if "application/sdp" in content_type:
        offer = RealtimeOffer(sdp=(await request.body()).decode("utf-8", errors="replace"))
    else:
        try:
            offer = RealtimeOffer.model_validate(await request.json())
        except ValueError:
            raise HTTPException(status_code=400, detail="Missing SDP offer.")

    if not offer.sdp.strip():
        raise HTTPException(status_code=400, detail="Missing SDP offer.")

    try:
        async with _open_upstream() as client:
            answer = await client.exchange_realtime_sdp(offer.sdp, model=offer.model)
    except UpstreamAPIError as exc:
        return Response(content=exc.message, status_code=502, media_type="text/plain")
    except httpx.HTTPError:
        logger.exception("Realtime upstream fetch failed")
        raise HTTPException(status_code=502, detail="Realtime upstream error.")

    return Response(content=answer, media_type="application/sdp")


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness check that also reports which upstream keys are configured.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        upstream_configured=api_key_configured(),
        generate_configured=gemini_key_configured(),
    )


def run_api():
    """Entry point for the tts-pacer-api console script."""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
