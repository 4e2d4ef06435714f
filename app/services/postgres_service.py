from __future__ import annotations

import enum
import logging
from typing import Any, Awaitable, Callable, Optional

import asyncpg

from app.services.secrets_service import Credential
from app.services.setup.sql import redact


logger = logging.getLogger(__name__)

Connector = Callable[..., Awaitable[Any]]


class ConnectionRole(enum.Enum):
    ADMINISTRATIVE = "mainConn"
    SERVICE = "serviceConn"
    CDC = "cdcDbConn"

    @property
    def log_tag(self) -> str:
        return f"[bootstrap.{self.value}]"


class PostgresConnection:
    """Thin wrapper over one asyncpg connection, scoped to a single role."""

    def __init__(self, *, role: ConnectionRole, raw: Any) -> None:
        self.role = role
        self._raw = raw
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def exists(self, query: str, *args: Any) -> bool:
        value = await self._raw.fetchval(query, *args)
        return bool(value)

    async def execute(self, statement: str) -> None:
        logger.info("%s %s", self.role.log_tag, redact(statement))
        await self._raw.execute(statement)

    async def execute_all(self, statements: list[str]) -> None:
        for statement in statements:
            await self.execute(statement)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._raw.close()


class PostgresConnectionFactory:
    """Opens role-scoped connections, all authenticated as the administrative user.

    The service and CDC roles may not be able to log in yet when their grants
    are applied, so the master credential is used for every role.
    """

    def __init__(
        self,
        *,
        host: str,
        port: int,
        credential: Credential,
        connect: Optional[Connector] = None,
    ) -> None:
        self._host = host
        self._port = port
        self._credential = credential
        self._connect = connect if connect is not None else asyncpg.connect

    def connect_kwargs(self, role: ConnectionRole, *, database: Optional[str] = None) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "host": self._host,
            "port": self._port,
            "user": self._credential.username,
            "password": self._credential.password,
        }
        if role is not ConnectionRole.ADMINISTRATIVE:
            if not database:
                raise ValueError(f"'database' must be provided for {role.name} connections")
            kwargs["database"] = database
        return kwargs

    async def open(self, role: ConnectionRole, *, database: Optional[str] = None) -> PostgresConnection:
        kwargs = self.connect_kwargs(role, database=database)
        logger.info(
            "%s connecting to %s:%s (database=%s)",
            role.log_tag,
            self._host,
            self._port,
            kwargs.get("database", "<default>"),
        )
        raw = await self._connect(**kwargs)
        return PostgresConnection(role=role, raw=raw)
