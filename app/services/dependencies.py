from __future__ import annotations

from app.services.config import BootstrapConfig, SecretsConfig
from app.services.secrets_service import SecretsService
from app.services.setup.database_setup_service import DatabaseSetupService


def get_secrets_service() -> SecretsService:
    """FastAPI dependency provider for a SecretsService instance."""

    return SecretsService(SecretsConfig.from_env())


def get_database_setup_service() -> DatabaseSetupService:
    """Dependency provider for the database bootstrap routine."""

    return DatabaseSetupService(
        config=BootstrapConfig.from_env(),
        secrets=get_secrets_service(),
    )
