"""
VetChat: two-party conversations between platform users and veterinarians.

Packages
--------
- api: FastAPI router, request/response models, JWT identity helpers
- database: settings, engine, entities, DAOs and the chat core operations
"""
