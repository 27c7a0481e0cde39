"""FastAPI application components."""
