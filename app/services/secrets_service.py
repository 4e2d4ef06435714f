from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import aioboto3

from app.services.config import SecretsConfig
from app.services.setup.sql import InvalidIdentifierError, validate_identifier


logger = logging.getLogger(__name__)


class SecretsServiceError(RuntimeError):
    pass


class SecretsConfigurationError(SecretsServiceError):
    """A required secret is missing, empty, or lacks username/password."""


@dataclass(frozen=True)
class Credential:
    username: str
    password: str = ""

    def __repr__(self) -> str:
        return f"Credential(username={self.username!r}, password='*****')"


@dataclass(frozen=True)
class ResolvedCredentials:
    master: Credential
    service: Credential
    cdc: Optional[Credential] = None


class SecretsService:
    """Reads `{username, password}` bundles from AWS Secrets Manager."""

    def __init__(self, config: SecretsConfig, *, session: Any = None) -> None:
        self._config = config
        self._session = session if session is not None else aioboto3.Session()

    def _client(self) -> Any:
        return self._session.client(
            "secretsmanager",
            region_name=self._config.region_name,
            endpoint_url=self._config.endpoint_url,
        )

    async def get_secret_payload(self, *, secret_id: str) -> Optional[dict[str, Any]]:
        """Fetch a secret and parse `SecretString` as a JSON object.

        Returns None when the secret has no string body, or the body is not a
        JSON object. AWS/transport failures raise SecretsServiceError.
        """

        try:
            if not secret_id:
                raise ValueError("'secret_id' must be provided")

            sm_client: Any = self._client()
            async with sm_client as sm:
                response = await sm.get_secret_value(SecretId=secret_id)
        except Exception as exc:
            raise SecretsServiceError(f"Failed to read secret from Secrets Manager (secret_id={secret_id})") from exc

        raw = response.get("SecretString")
        if not raw:
            return None

        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning("Secret payload is not valid JSON (secret_id=%s)", secret_id)
            return None

        return parsed if isinstance(parsed, dict) else None

    async def require_credential(self, *, secret_id: str) -> Credential:
        try:
            payload = await self.get_secret_payload(secret_id=secret_id)
        except SecretsServiceError:
            logger.exception("Secrets Manager get_secret_value failed")
            raise
        if payload is None:
            raise SecretsConfigurationError(f"Secret has no usable payload (secret_id={secret_id})")

        username = payload.get("username")
        password = payload.get("password")
        missing = [name for name, value in (("username", username), ("password", password)) if not value]
        if missing:
            raise SecretsConfigurationError(
                f"Secret is missing required field(s): {', '.join(missing)} (secret_id={secret_id})"
            )

        return Credential(username=str(username), password=str(password))

    async def optional_credential(self, *, secret_id: Optional[str]) -> Optional[Credential]:
        """Resolve the CDC credential, or None when CDC provisioning must be skipped.

        Unlike the required secrets, nothing about the CDC secret can fail the
        run: an unreadable secret, an incomplete bundle or a username that is not
        a plain lowercase identifier all disable CDC.
        """

        if not secret_id:
            return None

        try:
            payload = await self.get_secret_payload(secret_id=secret_id)
        except SecretsServiceError:
            logger.warning("CDC secret could not be read, skipping CDC provisioning (secret_id=%s)", secret_id)
            return None
        if payload is None:
            return None

        username = payload.get("username")
        password = payload.get("password")
        if not username or not password:
            return None

        try:
            validate_identifier(str(username), kind="CDC username")
        except InvalidIdentifierError as exc:
            logger.warning("%s, skipping CDC provisioning", exc)
            return None

        return Credential(username=str(username), password=str(password))

    async def resolve_credentials(
        self,
        *,
        master_secret_id: str,
        service_secret_id: str,
        cdc_secret_id: Optional[str] = None,
    ) -> ResolvedCredentials:
        master = await self.require_credential(secret_id=master_secret_id)
        service = await self.require_credential(secret_id=service_secret_id)
        cdc = await self.optional_credential(secret_id=cdc_secret_id)

        logger.info(
            "Resolved bootstrap credentials: master=%s, service=%s, cdc=%s",
            master.username,
            service.username,
            cdc.username if cdc else None,
        )
        return ResolvedCredentials(master=master, service=service, cdc=cdc)
