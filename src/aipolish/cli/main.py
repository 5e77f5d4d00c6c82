"""CLI entry point for aipolish."""

import logging

import click

from aipolish import __version__
from aipolish.cli.key_cmd import key_group
from aipolish.cli.process_cmd import process_cmd


@click.group()
@click.version_option(version=__version__, prog_name="aipolish")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """aipolish — rewrite files in place with an LLM."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )


cli.add_command(process_cmd)
cli.add_command(key_group)


if __name__ == "__main__":
    cli()
