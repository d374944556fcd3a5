"""Core timing model and the session pacer.

WHY: Everything that turns text into word timings, and timings into a
current word index, lives here. Renderers, formatters and the server
consume these types but never re-derive them.

HOW: ir.py defines the dataclasses, timing.py builds them from text,
pacer.py advances a PacerState over time, scheduling.py supplies the
frame schedulers the pacer runs on.

RULES:
- No I/O in this package
- No operation raises on malformed text or unknown language codes
"""
