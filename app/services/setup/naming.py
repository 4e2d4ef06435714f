from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from app.services.setup.sql import validate_identifier

SERVICE_USER_SUFFIX = "_user"


@dataclass(frozen=True)
class ProvisioningTarget:
    database_name: str
    schema_name: str

    @staticmethod
    def derive(
        *,
        service_username: str,
        database_name: Optional[str] = None,
        schema_name: Optional[str] = None,
    ) -> "ProvisioningTarget":
        """Explicit names win; otherwise follow the `{name}_user` account convention.

        `myapp_user` yields database `myapp` and schema `myapp_user`.
        """

        resolved_database = database_name or service_username.removesuffix(SERVICE_USER_SUFFIX)
        resolved_schema = schema_name or service_username

        return ProvisioningTarget(
            database_name=validate_identifier(resolved_database, kind="database name"),
            schema_name=validate_identifier(resolved_schema, kind="schema name"),
        )
