"""Application layer: DTOs, ports, services, and workflow use cases."""
