"""Application layer: DTOs, ports, and the services that orchestrate them."""
