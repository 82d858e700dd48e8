"""
Inkwell Backend: Middleware Package
=====================================

Cross-cutting concerns applied to every request.

Middleware Chain (execution order):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Responses pass back through the chain in reverse, so the request ID is
    on the response headers and the access log sees the final status code.
"""
