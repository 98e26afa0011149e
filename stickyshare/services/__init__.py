# Services package init
"""
StickyShare Backend — Services Layer
=====================================

What:  Business logic between the views/routes and the hosted storage gateway.
How:   Services accept domain objects, apply business rules, and return results.
       They're injected into routes via FastAPI's dependency injection.

Service Inventory:
    - StorageGateway (abstract): Interface to the hosted record + blob service
    - HttpStorageGateway: Concrete REST implementation over httpx
    - NoteRepository: list / insert / delete / get notes
    - ImageService: image validation, preview and upload
    - NoteService: Orchestrates validate → upload → insert
"""
