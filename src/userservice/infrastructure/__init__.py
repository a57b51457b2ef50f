"""Infrastructure layer: configuration, logging, storage, health and wiring."""
