"""CLI key management: aipolish key set | clear | status."""

from __future__ import annotations

from pathlib import Path

import click

from aipolish.core.config import load_config, resolve_home
from aipolish.core.credentials import (
    CredentialStoreError,
    delete_api_key,
    resolve_api_key,
    store_api_key,
)

_SOURCES = {
    "config": "config.yaml (openai.api_key)",
    "env": "OPENAI_API_KEY environment variable",
    "keyring": "system keyring",
}


@click.group("key")
def key_group() -> None:
    """Manage the OpenAI API key."""


@key_group.command("set")
def key_set() -> None:
    """Prompt for an API key and save it to the system keyring."""
    key = click.prompt("API key", hide_input=True).strip()
    if not key:
        raise click.ClickException("No API key provided.")
    try:
        store_api_key(key)
    except CredentialStoreError as e:
        raise click.ClickException(str(e)) from e
    click.echo("API key saved successfully.")


@key_group.command("clear")
def key_clear() -> None:
    """Remove the API key from the system keyring."""
    try:
        removed = delete_api_key()
    except CredentialStoreError as e:
        raise click.ClickException(str(e)) from e
    if removed:
        click.echo("API key removed from keyring.")
    else:
        click.echo("No API key stored in keyring.")


@key_group.command("status")
@click.option(
    "--home",
    type=click.Path(path_type=Path),
    default=None,
    help="Override AIPOLISH_HOME path.",
)
def key_status(home: Path | None) -> None:
    """Show where the API key would be read from, without printing it."""
    home_path = home or resolve_home()
    config = load_config(home_path / "config.yaml")
    key, source = resolve_api_key(config)
    if not key:
        click.echo("No API key configured. Run 'aipolish key set'.")
        return
    where = _SOURCES.get(source, source)
    if len(key) > 8:
        click.echo(f"API key found in {where} (...{key[-4:]}).")
    else:
        click.echo(f"API key found in {where}.")
