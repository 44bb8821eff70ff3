"""baton run -- send one prompt to a tool-less agent and print the run."""

from __future__ import annotations

import click

from baton.cli.formatting import format_error, format_run, get_console
from baton.orchestrator.config import DEFAULT_MAX_TURNS


def _build_gateway(api_key: str | None, base_url: str | None, model: str):
    from baton.llm.client import OpenAIClient
    from baton.llm.gateway import OpenAIGateway

    return OpenAIGateway(OpenAIClient(api_key=api_key, base_url=base_url, default_model=model))


@click.command()
@click.argument("prompt")
@click.option("--model", default="gpt-4o-mini", show_default=True, help="Model identifier.")
@click.option(
    "--instructions",
    default="You are a helpful agent.",
    help="System prompt for the agent.",
)
@click.option("--name", "agent_name", default="Agent", help="Agent name.")
@click.option(
    "--max-turns",
    default=DEFAULT_MAX_TURNS,
    show_default=True,
    type=click.IntRange(min=1),
    help="Maximum model round-trips.",
)
@click.option("--quiet", is_flag=True, help="Print only the final answer.")
@click.option("--debug", is_flag=True, help="Log run progress at INFO level.")
@click.pass_context
def run(
    ctx: click.Context,
    prompt: str,
    model: str,
    instructions: str,
    agent_name: str,
    max_turns: int,
    quiet: bool,
    debug: bool,
) -> None:
    """Run PROMPT through a single agent and print the transcript."""
    from baton.exceptions import BatonError
    from baton.models.agent import Agent
    from baton.models.messages import Message
    from baton.swarm import Swarm

    console = get_console()
    if debug:
        import logging

        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        gateway = _build_gateway(ctx.obj.get("api_key"), ctx.obj.get("base_url"), model)
        agent = Agent(name=agent_name, model=model, instructions=instructions)
        result = Swarm(gateway).run(
            agent,
            [Message.user(prompt)],
            max_turns=max_turns,
            debug=debug,
        )
        format_run(result, console, transcript=not quiet)
    except BatonError as e:
        format_error(str(e), console)
        raise SystemExit(1) from None
