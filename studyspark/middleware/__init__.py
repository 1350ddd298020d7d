"""
StudySpark Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    Request ID runs outside the access log so every access line, and every
    log line emitted while handling the request, carries the same ID.
"""
