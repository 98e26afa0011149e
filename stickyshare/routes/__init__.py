# Routes package init
"""
StickyShare Backend — Routes Package
=====================================

Route Inventory:
    - pages.py:   GET /, POST /notes, POST /notes/{id}/delete, GET /note/{id}
    - notes.py:   JSON API under /api (notes CRUD, share link, palette)
    - health.py:  GET /health

Routes stay thin: they pull request data, hand it to the views or services,
and pick a status code. Business rules live in services and views.
"""
