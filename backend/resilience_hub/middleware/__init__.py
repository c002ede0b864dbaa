# Middleware package init
"""
ResilienceHub Backend — Middleware Package
==========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (execution order):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    1. Rate Limit first: abusive clients are rejected before any work.
    2. Request ID: correlation id for logs and error responses.
    3. Logging: one access line per request, tagged with the request id.

Authentication is NOT middleware: it is a per-route dependency, so public
routes (register, login, plan listings, /health) never touch the session store.
"""
