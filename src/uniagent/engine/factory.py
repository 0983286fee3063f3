"""Factory for creating the execution engine.

Creates the real gateway engine when credentials are available, otherwise
falls back to the simulated engine.
"""

import logging
from typing import Optional

from uniagent.config import Settings, get_settings
from uniagent.engine.base import ExecutionEngine

logger = logging.getLogger(__name__)


def create_engine(settings: Optional[Settings] = None) -> ExecutionEngine:
    """Create the execution engine for the current settings.

    Uses the gateway engine only when dry-run is off and all project
    credentials are configured.
    """
    settings = settings or get_settings()

    if not settings.dry_run:
        if settings.has_engine_credentials:
            from uniagent.engine.http import HttpExecutionEngine

            logger.info(f"Using execution engine gateway at {settings.engine_api_url}")
            return HttpExecutionEngine(
                base_url=settings.engine_api_url,
                project_id=settings.engine_project_id,
                client_key=settings.engine_client_key,
                app_id=settings.engine_app_id,
                timeout=settings.engine_timeout_seconds,
            )
        logger.warning(
            "DRY_RUN is off but engine credentials are incomplete "
            "(ENGINE_PROJECT_ID, ENGINE_CLIENT_KEY, ENGINE_APP_ID) - using simulated engine"
        )

    # Fallback to simulated
    from uniagent.engine.dry_run import DryRunEngine

    return DryRunEngine()
