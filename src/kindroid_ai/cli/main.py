"""
Kindroid AI CLI: `kindroid` command.

Commands:
  kindroid configure          Save api key / AI id
  kindroid chat               Interactive REPL chat (!reset to start over)
  kindroid send <message>     One-shot message
  kindroid reset <greeting>   Chat break
  kindroid subscription       Subscription status
  kindroid history            Recent (decrypted) chat messages
  kindroid audio [message-id] Generate/download message audio
"""

import json
import os
from pathlib import Path
from typing import Optional

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install kindroid-ai[cli]")

from kindroid_ai.client import KindroidAI
from kindroid_ai.logging_config import configure_logging
from kindroid_ai.transport.http import DEFAULT_BASE_URL

console = Console()
CONFIG_FILE = Path.home() / ".kindroid" / "config.json"

ENV_KEYS = {
    "api_key": "KINDROID_API_KEY",
    "ai_id": "KINDROID_AI_ID",
    "user_id": "KINDROID_USER_ID",
    "base_url": "KINDROID_BASE_URL",
}


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def _resolve_settings(cfg: Optional[dict] = None) -> dict:
    """Environment variables override the saved config file."""
    cfg = dict(cfg if cfg is not None else _load_config())
    for key, env in ENV_KEYS.items():
        value = os.environ.get(env)
        if value:
            cfg[key] = value
    return cfg


def _get_client() -> KindroidAI:
    cfg = _resolve_settings()
    if not cfg.get("api_key") or not cfg.get("ai_id"):
        console.print("[red]Missing api key or AI id. Set KINDROID_API_KEY and KINDROID_AI_ID "
                      "or run `kindroid configure`.[/red]")
        raise SystemExit(1)
    return KindroidAI(
        cfg["api_key"],
        cfg["ai_id"],
        base_url=cfg.get("base_url", DEFAULT_BASE_URL),
        user_id=cfg.get("user_id"),
    )


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def main(verbose: bool):
    """Kindroid AI CLI."""
    configure_logging("DEBUG" if verbose else "WARNING")


@main.command("configure")
@click.option("--base-url", default=None, help="Kindroid API base URL")
def configure(base_url: Optional[str]):
    """Save api key and AI id to ~/.kindroid/config.json."""
    cfg = _load_config()
    api_key = click.prompt("API key", default=cfg.get("api_key"), hide_input=True)
    ai_id = click.prompt("AI id", default=cfg.get("ai_id"))
    _save_config({**cfg, "api_key": api_key, "ai_id": ai_id,
                  "base_url": base_url or cfg.get("base_url", DEFAULT_BASE_URL)})
    console.print(f"[dim]Saved to {CONFIG_FILE}[/dim]")


# Register subcommands from separate modules
from kindroid_ai.cli.chat import chat_cmd, send_cmd, reset_cmd
from kindroid_ai.cli.history import history_cmd, audio_cmd, subscription_cmd

main.add_command(chat_cmd)
main.add_command(send_cmd)
main.add_command(reset_cmd)
main.add_command(history_cmd)
main.add_command(audio_cmd)
main.add_command(subscription_cmd)


if __name__ == "__main__":
    main()
