"""Main CLI application using Typer."""
import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from ..chat import ChatError, ChatSession
from ..conversation import Message, MessageRole
from ..images import decode_image, encode_image_file, image_extension
from ..ui.formatting import format_latency
from .providers import require_provider

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="bananachat",
    help="Multimodal chat with streaming text and image responses",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


def _print_debug(level: str, component: str, message: str) -> None:
    """Debug callback printing dim trace lines."""
    console.print(f"[dim]{level.upper():<7} \\[{component}] {escape(message)}[/dim]")


class _StreamPrinter:
    """Store observer echoing streamed model text as it arrives."""

    def __init__(self) -> None:
        self._printed: dict[str, int] = {}

    def __call__(self, messages: tuple[Message, ...]) -> None:
        for message in messages[-1:]:
            if message.role != MessageRole.MODEL:
                continue
            shown = self._printed.get(message.id, 0)
            if len(message.text) > shown:
                console.print(
                    message.text[shown:], end="", markup=False, highlight=False, soft_wrap=True
                )
                self._printed[message.id] = len(message.text)


def _load_images(paths: list[Path]) -> list[str]:
    images = []
    for path in paths:
        try:
            images.append(encode_image_file(path))
        except (ValueError, OSError) as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)
    return images


def _save_images(message: Message, directory: Path) -> list[Path]:
    directory.mkdir(parents=True, exist_ok=True)
    saved = []
    for number, data in enumerate(message.images, start=1):
        path = directory / f"{message.id[:8]}-{number}{image_extension(data)}"
        path.write_bytes(decode_image(data))
        saved.append(path)
    return saved


def _print_reply_footer(reply: Message | None, save_dir: Path | None) -> None:
    if reply is None:
        return
    console.print()
    latency = format_latency(reply.latency)
    details = [f"latency {latency}"] if latency else []
    if reply.images:
        details.append(f"{len(reply.images)} image(s)")
    if details:
        console.print(f"[dim]{', '.join(details)}[/dim]")
    if reply.images and save_dir is not None:
        for path in _save_images(reply, save_dir):
            console.print(f"[green]Saved image:[/green] {path}")


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Prompt to send"),
    image: list[Path] = typer.Option(
        [],
        "--image",
        "-i",
        help="Image file to attach (repeatable)"
    ),
    save_images: Path | None = typer.Option(
        None,
        "--save-images",
        "-o",
        file_okay=False,
        dir_okay=True,
        help="Directory for images returned by the model"
    ),
    provider: str | None = typer.Option(
        None,
        "--provider",
        "-p",
        help="Model provider: gemini or openai (default: MODEL_PROVIDER)"
    ),
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Model name override"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Print trace messages"
    ),
):
    """Send one prompt and stream the answer."""
    images = _load_images(image)

    async def _ask():
        async with ChatSession(require_provider(console, provider, model)) as session:
            if verbose:
                session.set_debug_callback(_print_debug)
            unsubscribe = session.store.subscribe(_StreamPrinter())
            try:
                reply = await session.submit(prompt, images)
            except ChatError as e:
                console.print(f"[red]Error: {escape(str(e))}[/red]")
                raise typer.Exit(code=1)
            finally:
                unsubscribe()
            _print_reply_footer(reply, save_images)

    asyncio.run(_ask())


@app.command()
def chat(
    provider: str | None = typer.Option(
        None,
        "--provider",
        "-p",
        help="Model provider: gemini or openai (default: MODEL_PROVIDER)"
    ),
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Model name override"
    ),
    save_images: Path | None = typer.Option(
        None,
        "--save-images",
        "-o",
        file_okay=False,
        dir_okay=True,
        help="Directory for images returned by the model"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Print trace messages"
    ),
):
    """Interactive console chat."""
    async def _chat():
        async with ChatSession(require_provider(console, provider, model)) as session:
            if verbose:
                session.set_debug_callback(_print_debug)
            session.store.subscribe(_StreamPrinter())

            console.print(f"[bold yellow]Nano Banana Chat[/bold yellow] [dim]({session.provider.model})[/dim]")
            console.print("[dim]Type '/image PATH' to attach an image, 'exit', 'quit', or 'q' to leave[/dim]\n")

            pending: list[str] = []
            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                text = user_input.strip()
                if text.lower() in ('exit', 'quit', 'q'):
                    console.print("[dim]Goodbye![/dim]")
                    break

                if text.startswith("/image "):
                    try:
                        pending.append(encode_image_file(Path(text[len("/image "):].strip())))
                    except (ValueError, OSError) as e:
                        console.print(f"[red]Error: {escape(str(e))}[/red]")
                    else:
                        console.print(f"[dim]{len(pending)} image(s) attached[/dim]")
                    continue

                if not text and not pending:
                    continue

                console.print("[bold magenta]Model:[/bold magenta] ", end="")
                try:
                    reply = await session.submit(text, pending)
                except ChatError as e:
                    console.print(f"[red]Error: {escape(str(e))}[/red]")
                    continue
                pending = []
                _print_reply_footer(reply, save_images)
                console.print()

    try:
        asyncio.run(_chat())
    except KeyboardInterrupt:
        pass


@app.command(name="tui")
def tui_command(
    provider: str | None = typer.Option(
        None,
        "--provider",
        "-p",
        help="Model provider: gemini or openai (default: MODEL_PROVIDER)"
    ),
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Model name override"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch interactive TUI chat interface."""
    async def _tui():
        from ..ui import run_textual_tui

        session = ChatSession(require_provider(console, provider, model))
        try:
            await run_textual_tui(session, log_level=log_level)
        finally:
            console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_tui())
    except KeyboardInterrupt:
        pass


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
