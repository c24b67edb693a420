"""
SceneWeaver - Configuration and setup.

This module provides centralized configuration for the scene engine: chat
model initialization for the default backends, logging level and the
backend call policy, all driven by environment variables (optionally from
a ``.env`` file).
"""

# Standard library imports
import logging
import os
from typing import Optional

# Third party imports
from dotenv import load_dotenv
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

# Local imports
from sceneweaver_lib.core.constants import ConfigDefaults
from sceneweaver_lib.core.exceptions import ConfigurationError
from sceneweaver_lib.core.logger import config_logger as logger, setup_logging
from sceneweaver_lib.workflow.policy import PipelinePolicy

# Load environment variables
load_dotenv()

# LLM Configuration
MODEL_PROVIDER_OPTIONS = ["openai", "anthropic", "gemini"]
DEFAULT_PROVIDER = ConfigDefaults.DEFAULT_MODEL_PROVIDER

# Model configurations for each provider
MODEL_CONFIGS = {
    "openai": {
        "default_model": "gpt-4.1-mini",
        "env_key": "OPENAI_API_KEY",
        "max_tokens": 32768,
    },
    "anthropic": {
        "default_model": "claude-sonnet-4",
        "env_key": "ANTHROPIC_API_KEY",
        "max_tokens": 64000,
    },
    "gemini": {
        "default_model": "gemini-2.5-flash",
        "env_key": "GEMINI_API_KEY",
        "max_tokens": 1000000,
    },
}

# Default settings
DEFAULT_MODEL_PROVIDER = os.environ.get("DEFAULT_MODEL_PROVIDER", DEFAULT_PROVIDER)
DEFAULT_MODEL = os.environ.get("DEFAULT_MODEL", None)  # Specific model override
DEFAULT_TEMPERATURE = ConfigDefaults.DEFAULT_TEMPERATURE
ENVIRONMENT_STATE = os.environ.get(
    "SCENEWEAVER_ENVIRONMENT_STATE", ConfigDefaults.ENVIRONMENT_STATE
)


def _env_number(name: str, default: Optional[float], cast=float) -> Optional[float]:
    """Read a numeric environment variable, raising ConfigurationError on junk."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"Environment variable {name} must be a number, got {raw!r}",
            {"variable": name},
        ) from e


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Set up the engine's logging from the environment.

    Args:
        level: Level name overriding SCENEWEAVER_LOG_LEVEL (default INFO)

    Returns:
        The configured ``sceneweaver`` logger
    """
    level = level or os.environ.get("SCENEWEAVER_LOG_LEVEL") or ConfigDefaults.LOG_LEVEL
    log_file = os.environ.get("SCENEWEAVER_LOG_FILE") or None
    try:
        return setup_logging(level, log_file=log_file)
    except ValueError as e:
        raise ConfigurationError(str(e), {"variable": "SCENEWEAVER_LOG_LEVEL"}) from e


def get_pipeline_policy() -> PipelinePolicy:
    """
    Build the backend call policy from the environment.

    Without any of the SCENEWEAVER_BACKEND_* variables set, the policy makes a
    single attempt with no deadline.

    Returns:
        A validated PipelinePolicy
    """
    return PipelinePolicy(
        max_attempts=_env_number(
            "SCENEWEAVER_BACKEND_MAX_ATTEMPTS", ConfigDefaults.BACKEND_MAX_ATTEMPTS, int
        ),
        backoff_seconds=_env_number(
            "SCENEWEAVER_BACKEND_BACKOFF_SECONDS", ConfigDefaults.BACKEND_BACKOFF_SECONDS
        ),
        timeout_seconds=_env_number("SCENEWEAVER_BACKEND_TIMEOUT_SECONDS", None),
    )


def get_llm(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
) -> BaseChatModel:
    """
    Get an instance of the chat model with the specified parameters.

    Args:
        provider: The model provider to use (openai, anthropic, gemini)
        model: The model name to use (defaults to provider's default model)
        temperature: The temperature setting (defaults to 0.7)
        max_tokens: The maximum number of tokens to generate (defaults to provider's max_tokens)

    Returns:
        A configured chat model instance
    """
    provider = provider or os.environ.get("MODEL_PROVIDER") or DEFAULT_MODEL_PROVIDER
    temp = DEFAULT_TEMPERATURE if temperature is None else temperature

    if provider not in MODEL_PROVIDER_OPTIONS:
        raise ConfigurationError(
            f"Unsupported provider: {provider}",
            {"supported": MODEL_PROVIDER_OPTIONS},
        )

    provider_config = MODEL_CONFIGS[provider]
    model_name = model or DEFAULT_MODEL or provider_config["default_model"]
    api_key_env = provider_config["env_key"]
    api_key = os.environ.get(api_key_env)

    if not api_key:
        raise ConfigurationError(
            f"No API key found for {provider}. Please set {api_key_env} in your .env file.",
            {"provider": provider, "env_key": api_key_env},
        )

    tokens = max_tokens or provider_config.get("max_tokens")
    logger.info(f"Initializing {provider} chat model '{model_name}'")

    if provider == "openai":
        return ChatOpenAI(
            model=model_name,
            temperature=temp,
            openai_api_key=api_key,
            max_tokens=tokens,
        )
    elif provider == "anthropic":
        return ChatAnthropic(
            model=model_name,
            temperature=temp,
            anthropic_api_key=api_key,
            max_tokens=tokens,
        )
    return ChatGoogleGenerativeAI(
        model=model_name,
        temperature=temp,
        google_api_key=api_key,
        max_tokens=tokens,
    )
