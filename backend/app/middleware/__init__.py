# Middleware package init
"""
Inkpost Backend: Middleware Package
=====================================

Middleware Chain:
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: reject abusive clients before any processing
    2. Request ID: correlation ID for logs and the X-Request-ID header
    3. Logging: method, path, status and duration, tagged with the request ID
"""
