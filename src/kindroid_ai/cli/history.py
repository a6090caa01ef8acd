"""CLI: kindroid history, kindroid audio, kindroid subscription"""

import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from kindroid_ai.errors import KindroidAIError

console = Console()

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _get_client():
    from kindroid_ai.cli.main import _get_client
    return _get_client()


def _setup_user(client) -> None:
    client.setup_user_and_permissions()
    console.print(f"[dim]Authenticated as user {client.user_id}[/dim]")


@click.command("history")
@click.option("-n", "--limit", default=10, show_default=True)
def history_cmd(limit: int):
    """Show the most recent chat messages."""
    client = _get_client()
    try:
        _setup_user(client)
        messages = client.get_chat_history(limit=limit)
    except KindroidAIError as e:
        console.print(f"[red]Failed to get chat history:[/red] {e}")
        raise SystemExit(1)
    finally:
        client.close()

    table = Table("Time", "Sender", "Message")
    for msg in messages:
        t = msg.get_time()
        table.add_row(t.strftime(TIME_FORMAT) if t else "", msg.sender, msg.message)
    console.print(table)


@click.command("audio")
@click.argument("message_id", required=False)
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write audio here (default: <message-id>.mp3)")
def audio_cmd(message_id: Optional[str], output: Optional[Path]):
    """Fetch audio for a message, generating it if needed.

    Defaults to the most recent AI message.
    """
    client = _get_client()
    try:
        _setup_user(client)
        if not message_id:
            ai_messages = [m for m in client.get_chat_history(limit=10) if m.sender == "ai"]
            if not ai_messages:
                console.print("[red]No AI message found in recent history.[/red]")
                raise SystemExit(1)
            message_id = ai_messages[0].id
            console.print(f"[dim]Using message {message_id}: {ai_messages[0].message[:80]}[/dim]")
        with console.status("Generating audio..."):
            audio = client.audio_inference(message_id)
    except KindroidAIError as e:
        console.print(f"[red]Failed to generate audio:[/red] {e}")
        raise SystemExit(1)
    finally:
        client.close()

    path = output or Path(f"{message_id}.mp3")
    path.write_bytes(audio)
    console.print(f"[green]Wrote {len(audio)} bytes to {path}[/green]")


@click.command("subscription")
@click.option("--json-output", "--json", is_flag=True)
def subscription_cmd(json_output: bool):
    """Show subscription status."""
    client = _get_client()
    try:
        info = client.check_user_subscription()
    except KindroidAIError as e:
        console.print(f"[red]Failed to check subscription:[/red] {e}")
        raise SystemExit(1)
    finally:
        client.close()

    if json_output:
        click.echo(json.dumps(info.model_dump(by_alias=True)))
        return
    console.print(f"User: {info.uid} ({info.status})")
    for name, subscribed, platform, grace in (
        ("base", info.is_subscribed_base, info.subscription_platform_base, info.grace_period_base),
        ("addon1", info.is_subscribed_addon1, info.subscription_platform_addon1, info.grace_period_addon1),
        ("addon2", info.is_subscribed_addon2, info.subscription_platform_addon2, info.grace_period_addon2),
    ):
        state = "[green]subscribed[/green]" if subscribed else "[dim]not subscribed[/dim]"
        extra = f" via {platform}" if platform else ""
        if grace is not None:
            extra += f", grace period {grace}"
        console.print(f"  {name}: {state}{extra}")
