"""Upstream generative-AI client package: async passthrough to the hosted API.

WHY: The web client must not hold the API key. The HTTP service forwards
text-generation requests and realtime speech SDP offers upstream with a
server-held key. This package encapsulates that upstream communication.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. UpstreamClient exposes
one method per proxied call and returns UpstreamReply objects that carry
the upstream status, content type and body unchanged.

RULES:
- All upstream HTTP calls go through UpstreamClient (no direct httpx usage elsewhere)
- Authentication is via Bearer token from config
- Bodies are passed through untouched; the caller decides what to do with status
"""

from tts_pacer.api.client import GenerateClient, UpstreamAPIError, UpstreamClient
from tts_pacer.api.models import UpstreamReply

__all__ = ["GenerateClient", "UpstreamAPIError", "UpstreamClient", "UpstreamReply"]
