"""HTTP service: pacing endpoints and the upstream AI proxy.

WHY: Browser clients fetch timings, highlight parts and exports over
HTTP, and reach the hosted AI API through this service so the key never
leaves the server.

HOW: app.py defines the FastAPI app, models.py the Pydantic schemas.
Run with ``tts-pacer-api`` or ``uvicorn tts_pacer.server.app:app``.
"""
