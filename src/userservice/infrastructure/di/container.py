"""Dependency injection container for userservice."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config.config_loader import ConfigLoader
from ..config.config_models import UserServiceConfig
from ..health import HealthChecker
from ..logging import ServiceLogger
from ..persistence import InMemoryUserRepository, SQLiteUserRepository
from ..resilience import RetryConfig
from ...application.services.user_service import UserService
from ...domain.repositories.user_repository import UserRepository


@dataclass
class Container:
    """
    Dependency injection container for userservice.

    Assembles all components with explicit constructor injection.
    Created once at startup by the CLI or the HTTP app factory.
    """

    # Configuration
    config: UserServiceConfig

    # Infrastructure
    logger: ServiceLogger
    repository: UserRepository
    health_checker: HealthChecker

    # Application
    user_service: UserService

    @classmethod
    def create(
        cls,
        config_path: Optional[str] = None,
        config: Optional[UserServiceConfig] = None,
    ) -> "Container":
        """
        Create and wire all dependencies.

        Args:
            config_path: Optional path to configuration file
            config: Ready-made configuration (skips loading from disk/env)

        Returns:
            Container with all dependencies wired
        """
        if config is None:
            config = ConfigLoader.load(config_path)

        logger = ServiceLogger.configure(
            level=config.logging.level,
            log_file=Path(config.logging.file) if config.logging.file else None,
            console=config.logging.console,
            rotation=config.logging.rotation,
            retention_days=config.logging.retention_days,
        )

        repository = cls._create_repository(config)

        user_service = UserService(
            repository=repository,
            default_timeout=config.storage.timeout,
        )

        health_checker = HealthChecker(timeout=config.health.timeout)
        health_checker.add_check("storage", repository.check_health)

        logger.info(
            "Container initialized",
            extra={
                "environment": config.app.environment,
                "storage_provider": config.storage.provider,
            }
        )

        return cls(
            config=config,
            logger=logger,
            repository=repository,
            health_checker=health_checker,
            user_service=user_service,
        )

    @staticmethod
    def _busy_timeout(config: UserServiceConfig) -> float:
        """Per-attempt lock wait; all attempts together fit in ``storage.timeout``."""
        return config.storage.timeout / (config.storage.retry.max_retries + 1)

    @classmethod
    def _create_repository(cls, config: UserServiceConfig) -> UserRepository:
        """Build the user store selected by ``storage.provider``."""
        if config.storage.provider == "memory":
            return InMemoryUserRepository()

        retry = config.storage.retry
        repository = SQLiteUserRepository(
            path=Path(config.storage.path),
            busy_timeout=cls._busy_timeout(config),
            retry_config=RetryConfig(
                max_retries=retry.max_retries,
                initial_delay=retry.initial_delay,
                max_delay=retry.max_delay,
                exponential_base=retry.exponential_base,
                jitter=retry.jitter,
            ),
        )
        repository.initialize()
        return repository

    def __repr__(self) -> str:
        return f"<Container: storage={self.config.storage.provider}>"
