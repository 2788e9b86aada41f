"""
Storefront Backend — Application Package Initializer
=====================================================

What:  Server-side API of the storefront: authentication, admin management of
       blog posts / products / orders, the public catalogue, checkout and uploads.

Architecture Note:
    The backend is split into thin layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation, pricing, persistence
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   AppContext (collaborators)        │  ← DB sessions, hashing, tokens,
    │                                     │    email, image processing
    └─────────────────────────────────────┘

    Routes never import collaborators directly; they receive them through
    FastAPI dependencies that read the AppContext built by create_app().
"""

__version__ = "1.0.0"
