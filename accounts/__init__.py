"""User accounts API: authorization-gated user management over FastAPI."""
