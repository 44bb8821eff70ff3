"""Baton CLI -- run an agent from the terminal.

This module is NEVER imported from baton/__init__.py.
It is only loaded via the ``baton`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

try:
    import click
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install baton[cli]"
    ) from None

from baton._version import __version__


@click.group()
@click.version_option(__version__, prog_name="baton")
@click.option(
    "--api-key",
    default=None,
    envvar="BATON_OPENAI_API_KEY",
    help="API key for the OpenAI-compatible endpoint.",
)
@click.option(
    "--base-url",
    default=None,
    envvar="BATON_OPENAI_BASE_URL",
    help="Base URL of the OpenAI-compatible endpoint.",
)
@click.pass_context
def cli(ctx: click.Context, api_key: str | None, base_url: str | None) -> None:
    """Baton: multi-agent tool-calling runs with handoffs."""
    ctx.ensure_object(dict)
    ctx.obj["api_key"] = api_key
    ctx.obj["base_url"] = base_url


@cli.command()
def version() -> None:
    """Print the Baton version."""
    click.echo(f"baton {__version__}")


# Register subcommands after cli group is defined
from baton.cli.commands.run import run  # noqa: E402

cli.add_command(run)
