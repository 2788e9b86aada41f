# Middleware package init
"""
Storefront Backend — Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Auth Rate Limit] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID for logs and error bodies
    2. Logging: method, path, status, duration with the request ID
    3. Auth Rate Limit: caps login/register attempts per client IP; every
       other path passes straight through. Its 429 body carries the
       request ID like every other error body.

    Responses travel the same chain in reverse, so the X-Request-ID header
    and the logged status/duration are both set on the way out.
"""
