from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar, Optional


def _env(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


def _required_env(name: str) -> str:
    value = _env(name)
    if not value:
        raise ValueError(f"Missing required environment variable: {name}")
    return value


@dataclass(frozen=True)
class BootstrapConfig:
    """Runtime configuration for the database bootstrap run.

    Secret fields hold Secrets Manager identifiers (name or ARN), never the
    credentials themselves.
    """

    master_user_secret: str
    app_user_secret: str
    rds_host: str
    cdc_user_secret: Optional[str] = None
    app_database_name: Optional[str] = None
    app_schema_name: Optional[str] = None
    RDS_PORT: ClassVar[int] = 5432

    @property
    def rds_port(self) -> int:
        return self.RDS_PORT

    @staticmethod
    def from_env() -> "BootstrapConfig":
        return BootstrapConfig(
            master_user_secret=_required_env("MASTER_USER_SECRET"),
            app_user_secret=_required_env("APP_USER_SECRET"),
            rds_host=_required_env("RDS_HOST"),
            cdc_user_secret=_env("CDC_USER_SECRET"),
            app_database_name=_env("APP_DATABASE_NAME"),
            app_schema_name=_env("APP_SCHEMA_NAME"),
        )
