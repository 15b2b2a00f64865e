"""
Inkpost Backend: Security Package
===================================

    - passwords.py: bcrypt hashing and verification
    - tokens.py:    session token issue/verify (JWT)
    - guard.py:     authorization guard dependency for protected routes
"""
