"""CLI command: aipolish process FILES..."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from aipolish.core.config import load_config, resolve_home
from aipolish.core.credentials import CredentialStoreError, resolve_api_key, store_api_key
from aipolish.core.documents import open_documents
from aipolish.llm.completion import OpenAICompletionClient
from aipolish.processor import process_documents


def _setup_logging(config: dict, verbose: bool) -> None:
    if verbose:
        return  # configured by the group
    level_name = str(config.get("log_level", "warning")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _obtain_api_key(config: dict, api_key: str | None) -> str | None:
    """Resolve the API key, prompting and saving it to the keyring if absent."""
    key, _source = resolve_api_key(config, explicit=api_key)
    if key:
        return key

    key = click.prompt(
        "Please enter your API key for the AI assistant",
        hide_input=True,
        default="",
        show_default=False,
    ).strip()
    if not key:
        return None

    try:
        store_api_key(key)
        click.echo("API key saved successfully.")
    except CredentialStoreError as e:
        click.echo(f"Warning: {e}", err=True)
    return key


@click.command("process")
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--instruction",
    "-i",
    default=None,
    help='What the model should do with each file (default: "improve readability").',
)
@click.option("--model", "-m", default=None, help="Override the configured model.")
@click.option(
    "--api-key",
    default=None,
    help="Use this API key instead of config, environment, or keyring.",
)
@click.option("--dry-run", is_flag=True, help="Call the model but leave files unchanged.")
@click.option(
    "--home",
    type=click.Path(path_type=Path),
    default=None,
    help="Override AIPOLISH_HOME path.",
)
@click.pass_context
def process_cmd(
    ctx: click.Context,
    files: tuple[Path, ...],
    instruction: str | None,
    model: str | None,
    api_key: str | None,
    dry_run: bool,
    home: Path | None,
) -> None:
    """Process files with the AI assistant, replacing each file's contents.

    Files are sent one at a time. A failure on one file is reported and the
    remaining files are still processed.
    """
    home_path = home or resolve_home()
    config = load_config(home_path / "config.yaml")
    _setup_logging(config, (ctx.obj or {}).get("verbose", False))

    key = _obtain_api_key(config, api_key)
    if not key:
        click.echo("No API key provided.", err=True)
        ctx.exit(1)

    client_cfg = dict(config.get("openai") or {})
    client_cfg["api_key"] = key
    if model:
        client_cfg["model"] = model
    client = OpenAICompletionClient(client_cfg)

    use_instruction = instruction or config.get("instruction")
    documents = list(open_documents(files))
    total = len(documents)

    click.echo(f"Processing {total} file(s) with AI assistant ({client.model})...")

    def _progress(index: int, count: int, name: str) -> None:
        click.echo(f"[{index}/{count}] {name}")

    try:
        report = process_documents(
            documents,
            client.complete,
            instruction=use_instruction,
            progress=_progress,
            dry_run=dry_run,
        )
    except KeyboardInterrupt:
        click.echo("\nInterrupted.", err=True)
        ctx.exit(130)

    for result in report.results:
        if result.ok:
            suffix = " (dry run, not written)" if dry_run else ""
            click.echo(f"File {result.name} was processed by AI.{suffix}")
        else:
            click.echo(f"Error processing file {result.name} with AI: {result.error}", err=True)

    click.echo(f"\nProcessed {len(report.succeeded)}/{total} file(s).")
    if report.failed:
        ctx.exit(1)
