"""
Inkwell Backend: Pydantic Request/Response Schemas
==================================================

Schemas are the API contract; they are kept apart from the ORM models so the
password hash and ownership columns can never be set or leaked by accident.

    - user.py:    registration, login, token and user payloads
    - post.py:    post, comment and category payloads, post includes
    - common.py:  error and health payloads
"""
