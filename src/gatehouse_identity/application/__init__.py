"""Identity application layer: services, DTOs, ports and wiring."""
