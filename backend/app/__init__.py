"""
Inkpost Backend: Application Package
======================================

What: Blog backend. Users register and sign in with a session cookie; signed-in
      users publish posts with an optional cover image and may only change or
      delete the posts they authored.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Security (hashing, JWT, guard)    │  ← who is calling
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← ownership, cover lifecycle
    ├─────────────────────────────────────┤
    │  Repositories & Models (Persistence)│  ← async SQLAlchemy
    └─────────────────────────────────────┘

    Components are wired together in app/dependencies.py.
"""

__version__ = "1.0.0"
