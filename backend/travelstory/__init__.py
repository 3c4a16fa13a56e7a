"""
TravelStory Backend - Application Package
===========================================

A travel-journal API: users register, log in, and keep dated stories with
an optional uploaded image. Every story belongs to exactly one user and is
only ever visible to that user.

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Dependencies (access guard, DI)    │  ← token → owner id
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation, ownership, images
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
