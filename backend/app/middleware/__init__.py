# Middleware package init
"""
Inkwell Backend: Middleware Package
===================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route

    1. Request ID: correlation ID exists before anything can reject the request
    2. Rate Limit: reject abusive clients before any processing
    3. Logging:    records status and duration of what reached the app

Authentication is not middleware: protected routes declare the Auth Gate as
a dependency (app.dependencies.require_identity), so public routes never
pay for it.
"""
