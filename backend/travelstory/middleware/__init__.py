"""
TravelStory Backend - Middleware Package
==========================================

Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    1. Rate Limit first: reject abusive clients before any processing
    2. Request ID: correlation id for logs and error bodies
    3. Logging: one access line per request, tagged with the request id

Authentication is not middleware: the access guard is a route dependency
(see dependencies.py) so that only story and user routes require a token.
"""
