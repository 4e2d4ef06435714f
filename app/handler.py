"""Lambda-style entry point for running the bootstrap once per deployment."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from app.logging_setup import ensure_logging
from app.services.dependencies import get_database_setup_service


logger = logging.getLogger(__name__)


async def run_bootstrap() -> dict[str, str]:
    setup = get_database_setup_service()
    result = await setup.setup_database_environment()
    logger.info(result.message)
    return result.model_dump()


def handler(event: Optional[dict[str, Any]] = None, context: Any = None) -> dict[str, str]:
    ensure_logging()
    return asyncio.run(run_bootstrap())
