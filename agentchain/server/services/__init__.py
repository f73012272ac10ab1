"""Service singletons and FastAPI dependencies for the API layer."""
