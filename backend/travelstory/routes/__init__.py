"""
TravelStory Backend - API Routes Package
==========================================

Route Inventory:
    - auth.py:     POST /create-account, POST /login, GET /get-user
    - stories.py:  story CRUD, favourite toggle, search, date filter
    - images.py:   POST /image-upload, DELETE /delete-image
    - health.py:   GET  /health

Routes are thin: they read the request, call a service, and shape the
response envelope. Business rules live in services/.
"""
