"""Provider factory functions for CLI.

Centralizes creation of the chat controller from environment variables.
Hides configuration details from command implementations.
"""

import os
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console

from ..conversation import ChatController
from ..conversation.session import CapabilityFactory, DebugCallback
from ..llm import SUPPORTED_PROVIDERS, GenerationConfig, create_chat_capability
from ..prompts import get_system_prompt

# Generation settings and the variables that override them
GENERATION_VARIABLES = {
    "temperature": "NEXTUS_TEMPERATURE",
    "top_p": "NEXTUS_TOP_P",
    "top_k": "NEXTUS_TOP_K",
    "max_output_tokens": "NEXTUS_MAX_OUTPUT_TOKENS",
}

# Default console for output
_console = Console()

# Environment variables holding each provider's key, first match wins
CREDENTIAL_VARIABLES = {
    "gemini": ("GEMINI_API_KEY", "NEXT_PUBLIC_GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "openai": ("OPENAI_API_KEY",),
    "deepseek": ("DEEPSEEK_API_KEY",),
    "anthropic": ("ANTHROPIC_API_KEY",),
}

MODEL_VARIABLES = {
    "gemini": ("GEMINI_MODEL", "gemini-2.5-flash"),
    "openai": ("OPENAI_CHAT_MODEL", "gpt-4o-mini"),
    "deepseek": ("DEEPSEEK_MODEL", "deepseek-chat"),
    "anthropic": ("ANTHROPIC_MODEL", "claude-sonnet-4-20250514"),
}


def get_provider_name(console: Console | None = None) -> str:
    """Read the provider type.

    Environment variables:
        LLM_PROVIDER: gemini, openai, deepseek or anthropic (default: gemini)

    Raises:
        SystemExit: If the provider is unknown
    """
    con = console or _console
    provider = os.getenv("LLM_PROVIDER", "gemini").strip().lower()
    if provider == "claude":
        provider = "anthropic"
    if provider not in SUPPORTED_PROVIDERS:
        con.print(f"[red]Error: Unknown LLM provider: {provider}[/red]")
        raise typer.Exit(code=1)
    return provider


def get_credential(provider: str) -> str | None:
    """Return the API key for ``provider``, or None when none is configured.

    A missing key is a normal condition: the controller turns it into a
    configuration error in the transcript.
    """
    for name in CREDENTIAL_VARIABLES.get(provider, ()):
        value = os.getenv(name)
        if value and value.strip():
            return value.strip()
    return None


def get_model_name(provider: str) -> str:
    """Model for ``provider`` (GEMINI_MODEL, OPENAI_CHAT_MODEL, ...)."""
    variable, default = MODEL_VARIABLES[provider]
    return os.getenv(variable, default)


def _env_number(name: str, default: Any, cast: type) -> Any:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError:
        raise typer.BadParameter(f"{name} must be a {cast.__name__}, got {raw!r}") from None


def get_generation_config(provider: str) -> GenerationConfig:
    """Build the generation config fixed for the session.

    Environment variables:
        NEXTUS_TEMPERATURE: Sampling temperature (default: 1.0)
        NEXTUS_TOP_P: Nucleus sampling mass (default: 0.95)
        NEXTUS_TOP_K: Top-k truncation (default: 64)
        NEXTUS_MAX_OUTPUT_TOKENS: Maximum reply length (default: 65536)

    Raises:
        typer.BadParameter: If a value is not a number or out of range
    """
    try:
        return GenerationConfig(
            model=get_model_name(provider),
            temperature=_env_number("NEXTUS_TEMPERATURE", 1.0, float),
            top_p=_env_number("NEXTUS_TOP_P", 0.95, float),
            top_k=_env_number("NEXTUS_TOP_K", 64, int),
            max_output_tokens=_env_number("NEXTUS_MAX_OUTPUT_TOKENS", 65536, int),
            system_instruction=get_system_prompt(),
        )
    except ValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else ""
        name = GENERATION_VARIABLES.get(field, field)
        raise typer.BadParameter(f"{name}: {error['msg']}") from None


def get_capability_factory(provider: str) -> CapabilityFactory:
    """Factory building the provider's capability from an API key."""
    model = get_model_name(provider)

    def factory(api_key: str) -> Any:
        return create_chat_capability(provider, api_key=api_key, model=model)

    return factory


def build_controller(
    console: Console | None = None,
    debug_callback: DebugCallback | None = None,
) -> ChatController:
    """Create an unstarted chat controller from environment variables.

    Args:
        console: Optional Rich console for output
        debug_callback: Optional callable(level, component, message)

    Returns:
        ChatController; call ``start()`` to establish the session
    """
    provider = get_provider_name(console)
    return ChatController(
        capability_factory=get_capability_factory(provider),
        generation_config=get_generation_config(provider),
        credential=get_credential(provider),
        debug_callback=debug_callback,
    )
