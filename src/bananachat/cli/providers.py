"""Provider factory functions for CLI.

Centralizes creation of model providers from environment variables.
Hides configuration details from command implementations.
"""

import os

from rich.console import Console

from ..llm import ModelProvider, create_model_provider

# Default console for output
_console = Console()

GEMINI_KEY_VARIABLES = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


def _gemini_api_key() -> str | None:
    for name in GEMINI_KEY_VARIABLES:
        value = os.getenv(name)
        if value:
            return value
    return None


def get_provider(
    console: Console | None = None,
    provider: str | None = None,
    model: str | None = None,
) -> ModelProvider | None:
    """Create a model provider from environment variables.

    Args:
        console: Optional Rich console for output
        provider: Provider name, overriding MODEL_PROVIDER
        model: Model name, overriding the provider's model variable

    Returns:
        Model provider instance, or None if not configured

    Environment variables:
        MODEL_PROVIDER: Provider type (gemini, openai; default: gemini)
        GEMINI_API_KEY / GOOGLE_API_KEY / API_KEY: Gemini API key, first set wins
        GEMINI_MODEL: Gemini model (default: gemini-2.5-flash-image)
        OPENAI_API_KEY: OpenAI API key (for openai provider)
        OPENAI_CHAT_MODEL: OpenAI model (default: gpt-4o-mini)
    """
    con = console or _console
    provider_name = (provider or os.getenv("MODEL_PROVIDER", "gemini")).lower()

    if provider_name in ("gemini", "google"):
        api_key = _gemini_api_key()
        if not api_key:
            con.print("[yellow]Warning: GEMINI_API_KEY not set, chat disabled[/yellow]")
            return None
        return create_model_provider(
            "gemini",
            api_key=api_key,
            model=model or os.getenv("GEMINI_MODEL", "gemini-2.5-flash-image"),
        )

    elif provider_name == "openai":
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            con.print("[yellow]Warning: OPENAI_API_KEY not set, chat disabled[/yellow]")
            return None
        return create_model_provider(
            "openai",
            api_key=api_key,
            model=model or os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini"),
        )

    else:
        con.print(f"[red]Error: Unknown model provider: {provider_name}[/red]")
        return None


def require_provider(
    console: Console | None = None,
    provider: str | None = None,
    model: str | None = None,
) -> ModelProvider:
    """Get a model provider, raising error if not configured.

    Raises:
        SystemExit: If the model provider is not configured
    """
    import typer

    con = console or _console
    instance = get_provider(con, provider=provider, model=model)
    if not instance:
        con.print("[red]Error: Model provider not configured[/red]")
        raise typer.Exit(code=1)
    return instance
