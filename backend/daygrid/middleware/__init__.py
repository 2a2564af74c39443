"""
Daygrid Backend - Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Access Log] → [GZip] → [CORS] → Route

    - Rate limit rejects abusive clients before any other work
    - Request ID is set before the access log line is written
    - The access log records status and duration on the way back out
"""
