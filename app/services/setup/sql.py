"""SQL text for the database bootstrap.

Postgres does not accept bind parameters in DDL/DCL (CREATE DATABASE, GRANT,
``ENCRYPTED PASSWORD``), so identifiers are validated up front and rendered
unquoted, and literals are escaped with ``quote_literal``.
"""

from __future__ import annotations

import re


class BootstrapError(RuntimeError):
    pass


class InvalidIdentifierError(BootstrapError):
    pass


# Lowercase only: Postgres folds unquoted names, while asyncpg and pg_roles
# compare them verbatim.
_IDENTIFIER_RE = re.compile(r"^[a-z_][a-z0-9_$]*$")
_MAX_IDENTIFIER_LENGTH = 63
_PASSWORD_LITERAL_RE = re.compile(r"(PASSWORD\s+)'(?:[^']|'')*'", flags=re.IGNORECASE)

CDC_PUBLICATION_NAME = "cdc_publication"

DATABASE_EXISTS_QUERY = "SELECT exists(SELECT FROM pg_catalog.pg_database WHERE lower(datname) = lower($1))"
ROLE_EXISTS_QUERY = "SELECT exists(SELECT FROM pg_roles WHERE rolname = $1)"


def validate_identifier(name: str, *, kind: str = "identifier") -> str:
    if not name or not _IDENTIFIER_RE.match(name) or len(name) > _MAX_IDENTIFIER_LENGTH:
        raise InvalidIdentifierError(f"Invalid Postgres {kind}: {name!r}")
    return name


def quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def redact(statement: str) -> str:
    return _PASSWORD_LITERAL_RE.sub(r"\1'*****'", statement)


def create_database_statement(database: str) -> str:
    return f"CREATE DATABASE {database}"


def create_user_statement(username: str, password: str) -> str:
    return f"CREATE USER {username} WITH ENCRYPTED PASSWORD {quote_literal(password)}"


def service_grant_statements(*, database: str, schema: str, service_user: str) -> list[str]:
    # Order is significant; the second CREATE SCHEMA is kept as-is.
    return [
        f"CREATE SCHEMA IF NOT EXISTS {schema}",
        f"CREATE EXTENSION IF NOT EXISTS pg_trgm SCHEMA {schema} CASCADE",
        f"CREATE EXTENSION IF NOT EXISTS intarray SCHEMA {schema} CASCADE",
        f"GRANT CONNECT ON DATABASE {database} TO {service_user}",
        f"GRANT CREATE ON DATABASE {database} TO {service_user}",
        f"CREATE SCHEMA IF NOT EXISTS {schema}",
        "REVOKE CREATE ON SCHEMA public FROM PUBLIC",
        f"REVOKE ALL ON DATABASE {database} FROM PUBLIC",
        f"GRANT USAGE, CREATE ON SCHEMA {schema} TO {service_user}",
        f"ALTER DEFAULT PRIVILEGES IN SCHEMA {schema} GRANT ALL PRIVILEGES ON TABLES TO {service_user}",
        f"GRANT ALL PRIVILEGES on DATABASE {database} to {service_user}",
        f"ALTER DATABASE {database} OWNER TO {service_user}",
    ]


def cdc_grant_statements(*, database: str, schema: str, cdc_user: str) -> list[str]:
    return [
        f"GRANT CONNECT ON DATABASE {database} TO {cdc_user}",
        f"GRANT SELECT ON ALL TABLES IN SCHEMA {schema} TO {cdc_user}",
        f"GRANT rds_replication, rds_superuser TO {cdc_user}",
        f"CREATE PUBLICATION IF NOT EXISTS {CDC_PUBLICATION_NAME} FOR ALL TABLES",
    ]
