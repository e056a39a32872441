"""Infrastructure layer: persistence, picture storage, and security adapters."""
