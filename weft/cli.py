"""Command line entry points: ``weft run`` and ``weft flow``."""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from collections.abc import Callable, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text

from .agent import create_general_agent
from .config import WeftConfig, load_config
from .errors import ConfigError, WeftError
from .flow import FlowFactory, FlowType
from .infra.logging import configure_logging, get_logger
from .providers import OpenAIProvider
from .types import LLMProvider

logger = get_logger(__name__)

TIMEOUT_MESSAGE = "Operation terminated due to timeout. Please try a simpler request."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="weft", description="Run a tool-using agent or a planning flow")
    parser.add_argument("--config", help="Path to a TOML config file")
    parser.add_argument("--workspace", help="Working directory for shell and file tools")
    parser.add_argument("--log-level", help="Override the configured log level")
    parser.add_argument("--timeout", type=float, help="Wall-clock limit in seconds")

    sub = parser.add_subparsers(dest="command", required=True)
    run_p = sub.add_parser("run", help="Run the general agent once")
    run_p.add_argument("prompt", nargs="*", help="Request text; asked interactively when omitted")
    flow_p = sub.add_parser("flow", help="Plan the request and execute it step by step")
    flow_p.add_argument("prompt", nargs="*", help="Request text; asked interactively when omitted")
    return parser


def resolve_prompt(prompt: str | None, ask: Callable[[str], str] = Prompt.ask) -> str | None:
    """Return a non-blank prompt, asking for one when none was given."""
    if prompt is None:
        prompt = ask("Enter your prompt")
    if not prompt or not prompt.strip():
        logger.warning("empty_prompt")
        return None
    return prompt.strip()


async def execute(
    command: str,
    prompt: str,
    config: WeftConfig,
    provider: LLMProvider,
    console: Console,
    input_fn: Callable[[str], str] | None = None,
) -> int:
    agent = create_general_agent(
        provider, workspace_root=config.workspace_root, settings=config.agent, input_fn=input_fn
    )
    timeout = config.flow.timeout_seconds
    start = time.monotonic()
    logger.info("request_processing", command=command)
    try:
        if command == "flow":
            flow = FlowFactory.create_flow(
                FlowType.PLANNING, {"weft": agent}, llm=provider, continue_on_error=config.flow.continue_on_error
            )
            result = await asyncio.wait_for(flow.execute(prompt), timeout=timeout)
        else:
            result = await asyncio.wait_for(agent.run(prompt), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("request_timed_out", timeout_seconds=timeout)
        console.print(f"[red]{TIMEOUT_MESSAGE}[/red]")
        return 1
    except Exception as e:
        err = WeftError.wrap(e)
        logger.exception("request_failed", code=err.code)
        console.print(f"[red]Error: {escape(err.message)}[/red]")
        return 1
    finally:
        await agent.cleanup()

    logger.info("request_processed", elapsed_seconds=round(time.monotonic() - start, 2))
    console.print(Panel(Text(result), title=f"weft {command}"))
    return 0


def main(argv: Sequence[str] | None = None, provider: LLMProvider | None = None, console: Console | None = None) -> int:
    args = build_parser().parse_args(argv)
    console = console or Console()

    try:
        config = load_config(args.config)
    except ConfigError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        return 2
    updates: dict = {}
    if args.workspace:
        updates["workspace_root"] = args.workspace
    if args.timeout:
        updates["flow"] = config.flow.model_copy(update={"timeout_seconds": args.timeout})
    if updates:
        config = config.model_copy(update=updates)

    configure_logging(args.log_level or config.log.level, json_format=config.log.json_format)

    try:
        prompt = resolve_prompt(" ".join(args.prompt) if args.prompt else None)
        if prompt is None:
            return 1
        provider = provider or OpenAIProvider(config.llm_profile())
        return asyncio.run(execute(args.command, prompt, config, provider, console))
    except KeyboardInterrupt:
        logger.warning("operation_cancelled")
        return 130


def run() -> None:
    sys.exit(main())
