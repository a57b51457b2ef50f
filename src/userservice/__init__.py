"""
userservice - User CRUD service.

Organised with Hexagonal Architecture: a pure domain layer, an application
service that orchestrates use cases, and adapters (HTTP, CLI, storage) that
plug into the ports the domain defines.
"""

__version__ = "1.0.0"
