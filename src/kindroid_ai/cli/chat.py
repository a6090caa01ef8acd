"""CLI: kindroid chat, kindroid send, kindroid reset"""

from typing import Optional

import click
from rich.console import Console

from kindroid_ai.errors import KindroidAIError
from kindroid_ai.models.message import SendMessageOptions

console = Console()

RESET_COMMAND = "!reset"


def _get_client():
    from kindroid_ai.cli.main import _get_client
    return _get_client()


@click.command("chat")
def chat_cmd():
    """Interactive chat. Type !reset to start a new chat."""
    client = _get_client()
    console.print(f"[cyan]Type your message ('{RESET_COMMAND}' to reset chat, Ctrl+C to exit)[/cyan]\n")
    try:
        while True:
            msg = click.prompt("You", prompt_suffix=": ")
            if msg.lower() in ("/quit", "/exit"):
                break
            try:
                if msg == RESET_COMMAND:
                    greeting = click.prompt("AI greeting for the new chat")
                    client.chat_break(greeting)
                    console.print("[dim]Chat has been reset.[/dim]")
                    console.print(f"[green]AI:[/green] {greeting}")
                    continue
                with console.status("Waiting for reply..."):
                    reply = client.send_message(msg)
                console.print(f"[green]AI:[/green] {reply}")
            except KindroidAIError as e:
                console.print(f"[red]Error:[/red] {e}")
                raise SystemExit(1)
    except (KeyboardInterrupt, EOFError, click.Abort):
        pass
    finally:
        client.close()


@click.command("send")
@click.argument("message")
@click.option("--stream", is_flag=True, default=None, help="Request a streamed reply (passed through)")
@click.option("--image-url", "image_urls", multiple=True, help="Attach an image URL (repeatable)")
@click.option("--image-description", default=None)
@click.option("--video-url", default=None)
@click.option("--video-description", default=None)
@click.option("--link-url", default=None)
@click.option("--link-description", default=None)
@click.option("--internet-response", default=None)
def send_cmd(
    message: str,
    stream: Optional[bool],
    image_urls: tuple[str, ...],
    image_description: Optional[str],
    video_url: Optional[str],
    video_description: Optional[str],
    link_url: Optional[str],
    link_description: Optional[str],
    internet_response: Optional[str],
):
    """Send a one-shot message."""
    client = _get_client()
    try:
        options = SendMessageOptions(
            ai_id=client.ai_id,
            message=message,
            stream=stream or None,
            image_urls=list(image_urls) or None,
            image_description=image_description,
            video_url=video_url,
            video_description=video_description,
            link_url=link_url,
            link_description=link_description,
            internet_response=internet_response,
        )
        click.echo(client.send_message_advanced(options))
    except KindroidAIError as e:
        console.print(f"[red]Error sending message:[/red] {e}")
        raise SystemExit(1)
    finally:
        client.close()


@click.command("reset")
@click.argument("greeting")
def reset_cmd(greeting: str):
    """End the current chat; the AI opens the new one with GREETING."""
    client = _get_client()
    try:
        client.chat_break(greeting)
        console.print("[green]Chat has been reset.[/green]")
    except KindroidAIError as e:
        console.print(f"[red]Error resetting chat:[/red] {e}")
        raise SystemExit(1)
    finally:
        client.close()
