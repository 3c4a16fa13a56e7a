"""
TravelStory Backend - Services Layer
======================================

Service Inventory:
    - TokenService:  issue/verify signed session tokens
    - UserStore:     user persistence (lookup by email/id, create)
    - AuthService:   create-account, login, current user
    - StoryStore:    owner-scoped story persistence and queries
    - ImageService:  uploaded image files ↔ public URLs
    - StoryService:  story operations; composes StoryStore + ImageService

Stores and services receive their session/collaborators through their
constructors; dependencies.py wires them per request.
"""
