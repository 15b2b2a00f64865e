# Routes package init
"""
Inkpost Backend: API Routes Package
=====================================

Route Inventory:
    - auth.py:     POST /register, POST /login, GET /profile, POST /logout
    - posts.py:    POST /post, PUT /post, DELETE /post/{id},
                   GET /post, GET /post/{id}
    - uploads.py:  GET /uploads/{path}   (cover images)
    - health.py:   GET /health

Routes stay thin: extract request data, call a service, shape the response.
Errors are raised as InkpostError subclasses and rendered by the handlers
registered in main.py.
"""
