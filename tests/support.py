"""Test support utilities for the database bootstrap tests."""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Optional

from app.services.config import BootstrapConfig, SecretsConfig
from app.services.secrets_service import SecretsService
from app.services.setup.database_setup_service import DatabaseSetupService

MASTER_SECRET = {"username": "admin", "password": "admin_pw"}
SERVICE_SECRET = {"username": "myapp_user", "password": "mypw"}
CDC_SECRET = {"username": "cdc_user", "password": "cdc_pw"}


class FakeConnection:
    """Stands in for an asyncpg connection."""

    def __init__(
        self,
        *,
        databases: Iterable[str] = (),
        roles: Iterable[str] = (),
        fail: bool = False,
    ) -> None:
        self.databases = {name.lower() for name in databases}
        self.roles = set(roles)
        self.fail = fail
        self.queries: list[tuple[str, tuple[Any, ...]]] = []
        self.statements: list[str] = []
        self.close_calls = 0

    async def fetchval(self, query: str, *args: Any) -> bool:
        self.queries.append((query, args))
        if self.fail:
            raise RuntimeError("query failed")
        if "pg_database" in query:
            return str(args[0]).lower() in self.databases
        if "pg_roles" in query:
            return args[0] in self.roles
        return False

    async def execute(self, statement: str) -> str:
        if self.fail:
            raise RuntimeError("query failed")
        self.statements.append(statement)
        return "OK"

    async def close(self) -> None:
        self.close_calls += 1

    @property
    def called(self) -> bool:
        return bool(self.queries or self.statements)


class FakeConnector:
    """Replaces `asyncpg.connect`; hands out connections by target database."""

    def __init__(
        self,
        *,
        admin: Optional[FakeConnection] = None,
        service: Optional[FakeConnection] = None,
        cdc: Optional[FakeConnection] = None,
        fail_open: Iterable[str] = (),
    ) -> None:
        self.admin = admin or FakeConnection()
        self.service = service or FakeConnection()
        self.cdc = cdc or FakeConnection()
        self.fail_open = set(fail_open)
        self.calls: list[dict[str, Any]] = []

    async def __call__(self, **kwargs: Any) -> FakeConnection:
        self.calls.append(kwargs)
        if "database" not in kwargs:
            name, conn = "admin", self.admin
        elif sum(1 for call in self.calls if "database" in call) == 1:
            name, conn = "service", self.service
        else:
            name, conn = "cdc", self.cdc
        if name in self.fail_open:
            raise ConnectionRefusedError(f"{name} connection refused")
        return conn


class _FakeSecretsClient:
    def __init__(self, session: "FakeSecretsSession") -> None:
        self._session = session

    async def __aenter__(self) -> "_FakeSecretsClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get_secret_value(self, *, SecretId: str) -> dict[str, Any]:
        self._session.requested.append(SecretId)
        if SecretId not in self._session.secrets:
            raise LookupError(f"ResourceNotFoundException: {SecretId}")
        value = self._session.secrets[SecretId]
        if value is None:
            return {}
        if isinstance(value, str):
            return {"SecretString": value}
        return {"SecretString": json.dumps(value)}


class FakeSecretsSession:
    """Replaces `aioboto3.Session` for Secrets Manager lookups."""

    def __init__(self, secrets: Mapping[str, Any]) -> None:
        self.secrets = dict(secrets)
        self.requested: list[str] = []
        self.clients: list[tuple[str, dict[str, Any]]] = []

    def client(self, service_name: str, **kwargs: Any) -> _FakeSecretsClient:
        self.clients.append((service_name, kwargs))
        return _FakeSecretsClient(self)


def make_config(**overrides: Any) -> BootstrapConfig:
    values: dict[str, Any] = {
        "master_user_secret": "master",
        "app_user_secret": "app",
        "rds_host": "localhost",
        "cdc_user_secret": None,
        "app_database_name": "app_db",
        "app_schema_name": "app_schema",
    }
    values.update(overrides)
    return BootstrapConfig(**values)


def make_setup_service(
    *,
    config: Optional[BootstrapConfig] = None,
    connector: Optional[FakeConnector] = None,
    cdc_secret: Any = CDC_SECRET,
    secrets: Optional[Mapping[str, Any]] = None,
) -> tuple[DatabaseSetupService, FakeConnector, FakeSecretsSession]:
    config = config or make_config()
    connector = connector or FakeConnector()
    payloads: dict[str, Any] = {
        config.master_user_secret: MASTER_SECRET,
        config.app_user_secret: SERVICE_SECRET,
    }
    if config.cdc_user_secret:
        payloads[config.cdc_user_secret] = cdc_secret
    if secrets is not None:
        payloads.update(secrets)

    session = FakeSecretsSession(payloads)
    service = DatabaseSetupService(
        config=config,
        secrets=SecretsService(SecretsConfig(region_name="us-east-1"), session=session),
        connect=connector,
    )
    return service, connector, session
