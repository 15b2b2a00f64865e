"""
Inkpost Backend: Repositories
===============================

    - base.py:  UserRepository / PostRepository interfaces
    - users.py: SQLAlchemy credential store
    - posts.py: SQLAlchemy post repository
"""
