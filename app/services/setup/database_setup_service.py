from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from app.models.bootstrap import BootstrapResponse
from app.services.config import BootstrapConfig
from app.services.postgres_service import (
    ConnectionRole,
    Connector,
    PostgresConnection,
    PostgresConnectionFactory,
)
from app.services.secrets_service import Credential, ResolvedCredentials, SecretsService
from app.services.setup.naming import ProvisioningTarget
from app.services.setup.sql import (
    DATABASE_EXISTS_QUERY,
    ROLE_EXISTS_QUERY,
    cdc_grant_statements,
    create_database_statement,
    create_user_statement,
    service_grant_statements,
    validate_identifier,
)


logger = logging.getLogger(__name__)

ConnectionWork = Callable[[PostgresConnection], Awaitable[None]]


class DatabaseSetupService:
    """Provisioning helper for the application's Postgres database and roles.

    One run resolves secrets, derives names, then works through three
    independent connections in order:
    - administrative: create the database and the service/CDC roles if missing;
    - service: schema, extensions, grants and ownership for the service role;
    - CDC: replication grants and the logical replication publication.

    A failure on one connection is logged and the next connection still runs.
    Only configuration problems (secrets, names) abort the run.
    """

    def __init__(
        self,
        *,
        config: BootstrapConfig,
        secrets: SecretsService,
        connect: Optional[Connector] = None,
    ) -> None:
        self._config = config
        self._secrets = secrets
        self._connect = connect

    @staticmethod
    def ready_message(database_name: str) -> str:
        return f"Database '{database_name}' usernames are ready for use!"

    async def setup_database_environment(self) -> BootstrapResponse:
        """Public entry point: ensure the database, roles and grants exist."""

        credentials = await self._secrets.resolve_credentials(
            master_secret_id=self._config.master_user_secret,
            service_secret_id=self._config.app_user_secret,
            cdc_secret_id=self._config.cdc_user_secret,
        )
        target = ProvisioningTarget.derive(
            service_username=credentials.service.username,
            database_name=self._config.app_database_name,
            schema_name=self._config.app_schema_name,
        )
        validate_identifier(credentials.service.username, kind="service username")

        logger.info(
            "Bootstrapping database=%s schema=%s (cdc=%s)",
            target.database_name,
            target.schema_name,
            "enabled" if credentials.cdc is not None else "skipped",
        )

        connections = PostgresConnectionFactory(
            host=self._config.rds_host,
            port=self._config.rds_port,
            credential=credentials.master,
            connect=self._connect,
        )

        async def _administrative(conn: PostgresConnection) -> None:
            await self._provision_administrative(conn, target=target, credentials=credentials)

        async def _service(conn: PostgresConnection) -> None:
            await self._grant_service(conn, target=target, service=credentials.service)

        await self._run_isolated(connections, ConnectionRole.ADMINISTRATIVE, database=None, work=_administrative)
        await self._run_isolated(connections, ConnectionRole.SERVICE, database=target.database_name, work=_service)

        cdc = credentials.cdc
        if cdc is not None:

            async def _cdc(conn: PostgresConnection) -> None:
                await self._grant_cdc(conn, target=target, cdc=cdc)

            await self._run_isolated(connections, ConnectionRole.CDC, database=target.database_name, work=_cdc)

        return BootstrapResponse(message=self.ready_message(target.database_name))

    # -----------------
    # Private helpers
    # -----------------

    async def _run_isolated(
        self,
        connections: PostgresConnectionFactory,
        role: ConnectionRole,
        *,
        database: Optional[str],
        work: ConnectionWork,
    ) -> None:
        conn: Optional[PostgresConnection] = None
        try:
            conn = await connections.open(role, database=database)
            await work(conn)
        except Exception as exc:
            logger.exception("%s %s", role.log_tag, exc)
        finally:
            if conn is not None:
                try:
                    await conn.close()
                except Exception as exc:
                    logger.warning("%s close failed: %s", role.log_tag, exc)

    async def _ensure_role(self, conn: PostgresConnection, credential: Credential) -> None:
        if await conn.exists(ROLE_EXISTS_QUERY, credential.username):
            logger.info("%s role exists: %s", conn.role.log_tag, credential.username)
            return
        await conn.execute(create_user_statement(credential.username, credential.password))

    async def _provision_administrative(
        self,
        conn: PostgresConnection,
        *,
        target: ProvisioningTarget,
        credentials: ResolvedCredentials,
    ) -> None:
        if await conn.exists(DATABASE_EXISTS_QUERY, target.database_name):
            logger.info("%s database exists: %s", conn.role.log_tag, target.database_name)
        else:
            await conn.execute(create_database_statement(target.database_name))

        await self._ensure_role(conn, credentials.service)

        if credentials.cdc is not None:
            await self._ensure_role(conn, credentials.cdc)

    async def _grant_service(self, conn: PostgresConnection, *, target: ProvisioningTarget, service: Credential) -> None:
        await conn.execute_all(
            service_grant_statements(
                database=target.database_name,
                schema=target.schema_name,
                service_user=service.username,
            )
        )

    async def _grant_cdc(self, conn: PostgresConnection, *, target: ProvisioningTarget, cdc: Credential) -> None:
        await conn.execute_all(
            cdc_grant_statements(
                database=target.database_name,
                schema=target.schema_name,
                cdc_user=cdc.username,
            )
        )
