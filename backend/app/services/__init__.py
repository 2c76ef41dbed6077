# Services package init
"""
Inkwell Backend: Services Layer
===============================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Services take an AsyncSession and, for protected operations, the
       caller's Identity as explicit arguments.

Service Inventory:
    - passwords:      bcrypt hashing / verification (credential store primitives)
    - TokenService:   signed, time-limited bearer tokens
    - AuthGate:       Authorization header → Identity, or 401
    - UserService:    registration, login, self-service user CRUD
    - PostService:    posts, comments, categories with ownership checks
"""
