"""Tempo Daily Advice MCP Server: application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from tempo.core.config.settings import get_settings
from tempo.core.llm.client import AdviceGenerationClient, GenerationPolicy
from tempo.core.llm.provider import LLMProvider, create_provider
from tempo.core.storage.database import AdviceDatabase, DatabaseError
from tempo.core.storage.encryption import EncryptionError, FieldEncryptor
from tempo.core.storage.repository import AdviceRepository, RepositoryError
from tempo.domains.advice.connectors import HealthDataProvider
from tempo.domains.advice.connectors.providers import MockHealthDataProvider
from tempo.domains.advice.prompts.advice_prompts import register_advice_prompts
from tempo.domains.advice.resources.advice_resources import register_advice_resources
from tempo.domains.advice.tools.daily_advice_tools import register_daily_advice_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "Tempo Daily Advice"
SERVER_VERSION = "0.1.0"


def create_app(
    *,
    health_data_provider_override: HealthDataProvider | None = None,
    llm_provider_override: LLMProvider | None = None,
    repository_override: AdviceRepository | None = None,
    generation_policy_override: GenerationPolicy | None = None,
) -> FastMCP:
    """Create and configure the Tempo advice MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Creates the generation provider and advice client
    3. Initializes the health data provider (mock unless overridden)
    4. Initializes the encrypted advice store when a key is configured
    5. Registers all tools, resources, and prompts
    """
    settings = get_settings()

    # --- Server instance ---
    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "Tempo daily advice server. Validates onboarding profiles, scores "
            "today's health data against the user's own weekly baseline, picks "
            "one non-repeating daily try, and returns schema-checked advice "
            "written by a generation provider."
        ),
    )

    # --- Generation provider ---
    if llm_provider_override is not None:
        provider = llm_provider_override
        provider_name = "override"
    else:
        if settings.llm_provider == "mock":
            provider_name, api_key, model = "mock", "", ""
        elif settings.llm_provider == "anthropic":
            api_key = settings.anthropic_api_key
            model = settings.anthropic_model
            provider_name = "anthropic" if api_key else "mock"
        elif settings.llm_provider == "openai":
            api_key = settings.openai_api_key
            model = settings.openai_model
            provider_name = "openai" if api_key else "mock"
        else:  # pragma: no cover
            raise ValueError(f"Unknown LLM provider: {settings.llm_provider!r}")

        if provider_name == "mock" and settings.llm_provider != "mock":
            logger.warning(
                "No API key configured for provider '%s'; falling back to mock provider",
                settings.llm_provider,
            )
        provider = create_provider(provider_name=provider_name, api_key=api_key, model=model)

    policy = generation_policy_override or GenerationPolicy.from_settings(settings)
    llm_client = AdviceGenerationClient(provider=provider, policy=policy)

    # --- Health data provider ---
    if health_data_provider_override is not None:
        health_provider = health_data_provider_override
    else:
        health_provider = MockHealthDataProvider()
        logger.info("Using mock health data provider")

    # --- Encrypted advice store ---
    repository: AdviceRepository | None = None
    if repository_override is not None:
        repository = repository_override
    elif settings.encryption_key:
        try:
            encryptor = FieldEncryptor(
                settings.encryption_key,
                previous_keys=settings.previous_encryption_key_list,
            )
            advice_db = AdviceDatabase(settings.db_path)
            advice_db.initialize()
            repository = AdviceRepository(advice_db, encryptor)
            if settings.previous_encryption_key_list:
                repository.rotate_encryption()
            logger.info(
                "Advice store initialized: %s (schema v%d)",
                settings.db_path,
                advice_db.get_schema_version(),
            )
        except (EncryptionError, DatabaseError, RepositoryError) as exc:
            repository = None
            logger.error("Failed to initialize storage: %s", exc)
            logger.warning("Continuing without persistence; history will not be kept")
    else:
        logger.info(
            "No ENCRYPTION_KEY configured; running without persistence. "
            "Set ENCRYPTION_KEY to keep profiles and try history."
        )

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        status = {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "llm_provider": provider_name,
            "language": settings.advice_language,
            "health_data_source": health_provider.data_source,
            "storage_enabled": repository is not None,
        }
        if repository is not None:
            status["profiles_stored"] = repository.count_users()
        return status

    register_daily_advice_tools(
        server,
        llm_client,
        health_provider,
        repository,
        language=settings.advice_language,
        lookback_days=settings.lookback_days,
    )
    logger.info("Daily advice tools registered")

    # --- Register resources ---
    register_advice_resources(server)

    # --- Register prompts ---
    register_advice_prompts(server)

    return server


# Module-level instance for FastMCP discovery ("...app.py:mcp").
# Lazy: only created when this attribute is accessed (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
