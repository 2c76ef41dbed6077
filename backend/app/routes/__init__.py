# Routes package init
"""
Inkwell Backend: API Routes Package
===================================

Route Inventory:
    - users.py:   /users/register, /users/login, /users, /users/{user_id}
    - posts.py:   /posts, /posts/{post_id}, /posts/{post_id}/comments,
                  /posts/{post_id}/categories
    - health.py:  GET /health

Routes are thin: they extract the request data, declare the Auth Gate
dependency where a route is protected, call a service, and return a
response model. Ownership rules live in the services.
"""
