"""Terminal client and server launcher."""

from __future__ import annotations

import asyncio

import click

from webhook_chat.application.conversation import Conversation
from webhook_chat.application.exceptions import IdentityValidationError
from webhook_chat.config import get_settings
from webhook_chat.domain.models import Sender
from webhook_chat.logging_config import setup_logging

LOGOUT_COMMANDS = {"/sair", "/logout"}


@click.group()
def cli():
    """Chat with a remote assistant webhook."""
    pass


@cli.command()
@click.option("--webhook-url", default=None, help="Overrides WEBHOOK_URL for this run.")
@click.option("--locale", type=click.Choice(["pt-BR", "en"]), default=None)
@click.option("--log-level", default="WARNING", show_default=True)
def chat(webhook_url: str | None, locale: str | None, log_level: str):
    """Interactive chat session in the terminal."""
    setup_logging(level=log_level)

    overrides = {
        key: value
        for key, value in {"webhook_url": webhook_url, "locale": locale}.items()
        if value
    }
    conversation = Conversation.from_settings(
        settings_provider=lambda: get_settings().model_copy(update=overrides)
    )

    try:
        asyncio.run(_run(conversation))
    except (KeyboardInterrupt, EOFError):
        click.echo()
    finally:
        conversation.logout()


@cli.command()
@click.option("--host", default=None, help="Defaults to API_HOST.")
@click.option("--port", type=int, default=None, help="Defaults to API_PORT.")
def serve(host: str | None, port: int | None):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "webhook_chat.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
    )


# ---------------------------------------------------------------------------
# Interactive loop
# ---------------------------------------------------------------------------


def _capture_identity(conversation: Conversation) -> None:
    """Prompt until the registration form is accepted."""
    while True:
        full_name = click.prompt("Full name")
        national_id = click.prompt("CPF (000.000.000-00)")
        consent = click.confirm("I agree to the collection and processing of my data")
        try:
            identity = conversation.start(full_name, national_id, consent)
        except IdentityValidationError as exc:
            for field, reason in exc.problems.items():
                click.secho(f"  {field}: {reason}", fg="red")
            continue
        click.secho(
            f"Connected as {identity.first_name} ({identity.display_national_id})", fg="green"
        )
        return


def _print_turns(conversation: Conversation, already_shown: int) -> int:
    turns = conversation.transcript()
    for turn in turns[already_shown:]:
        if turn.sender is Sender.ASSISTANT:
            stamp = turn.created_at.astimezone().strftime("%H:%M:%S")
            click.echo(f"{click.style('assistant', fg='cyan')} [{stamp}] {turn.content}")
    for toast in conversation.drain_notifications():
        click.secho(f"[{toast.title}] {toast.description}", fg="red", err=True)
    return len(turns)


async def _run(conversation: Conversation) -> None:
    while True:
        _capture_identity(conversation)
        shown = _print_turns(conversation, 0)

        while True:
            line = await asyncio.to_thread(input, "> ")
            if line.strip() in LOGOUT_COMMANDS:
                conversation.logout()
                click.echo("Session ended.")
                break
            await conversation.send(line)
            shown = _print_turns(conversation, shown)


if __name__ == "__main__":
    cli()
