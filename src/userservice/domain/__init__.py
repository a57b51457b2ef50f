"""
Domain layer - Pure business logic with no external dependencies.

This layer contains:
- Validation rules for user input
- Domain models (the User entity)
- Repository interfaces (ports)
- Domain exceptions

IMPORTANT: This layer must NOT depend on infrastructure or application layers.
"""
