"""Command line front end for the netctrl console."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel

from netctrl_console import __version__
from netctrl_console.config import ConsoleConfig, LogLevel, get_config
from netctrl_console.console import Console
from netctrl_console.forms.cluster_form import ClusterForm
from netctrl_console.utils.errors import ConfigurationError, ConsoleError

logger = logging.getLogger(__name__)


def setup_logging(level: LogLevel) -> None:
    """Configure logging for the console."""
    logging.basicConfig(
        level=level.value,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="netctrl-console",
        description="Manage netctrl clusters and inspect their agents",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="netctrl-server URL (default: from config or http://localhost:8080)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)",
    )

    resources = parser.add_subparsers(dest="resource", required=True)

    resources.add_parser("health", help="Check that netctrl-server is reachable")

    clusters = resources.add_parser("clusters", help="Cluster operations")
    cluster_cmds = clusters.add_subparsers(dest="command", required=True)
    cluster_cmds.add_parser("list", help="List clusters")
    get_cluster = cluster_cmds.add_parser("get", help="Show one cluster")
    get_cluster.add_argument("id")
    create = cluster_cmds.add_parser("create", help="Create a cluster")
    create.add_argument("--name", required=True)
    create.add_argument("--description", default=None)
    update = cluster_cmds.add_parser("update", help="Change a cluster's name or description")
    update.add_argument("id")
    update.add_argument("--name", default=None)
    update.add_argument("--description", default=None)
    delete = cluster_cmds.add_parser("delete", help="Delete a cluster")
    delete.add_argument("id")

    agents = resources.add_parser("agents", help="Agent operations")
    agent_cmds = agents.add_subparsers(dest="command", required=True)
    list_agents = agent_cmds.add_parser("list", help="List agents")
    list_agents.add_argument("--cluster-id", default=None, help="Only agents of this cluster")
    get_agent = agent_cmds.add_parser("get", help="Show one agent")
    get_agent.add_argument("id")
    unregister = agent_cmds.add_parser("unregister", help="Unregister an agent")
    unregister.add_argument("id")

    return parser


def _to_json(result: Any) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    if isinstance(result, list):
        return [_to_json(item) for item in result]
    return result


async def run_command(console: Console, args: argparse.Namespace) -> Any:
    """Dispatch a parsed command to the console."""
    if args.resource == "health":
        healthy = await console.health_check()
        return {"healthy": healthy}

    if args.resource == "clusters":
        if args.command == "list":
            return await console.list_clusters()
        if args.command == "get":
            return await console.get_cluster(args.id)
        if args.command == "create":
            form = ClusterForm.for_create()
            form.set_field("name", args.name)
            if args.description is not None:
                form.set_field("description", args.description)
            return await form.submit(console)
        if args.command == "update":
            form = ClusterForm.for_update(args.id)
            for name in ("name", "description"):
                value = getattr(args, name)
                if value is not None:
                    form.set_field(name, value)
            return await form.submit(console)
        if args.command == "delete":
            await console.delete_cluster(args.id)
            return {"deleted": args.id}

    if args.resource == "agents":
        if args.command == "list":
            return await console.list_agents(args.cluster_id)
        if args.command == "get":
            return await console.get_agent(args.id)
        if args.command == "unregister":
            await console.unregister_agent(args.id)
            return {"unregistered": args.id}

    raise ValueError(f"Unknown command: {args.resource} {getattr(args, 'command', '')}")


async def _run(config: ConsoleConfig, args: argparse.Namespace) -> Any:
    async with Console(config) as console:
        return await run_command(console, args)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Build config from args, falling back to environment/defaults
    config_kwargs: dict[str, Any] = {}
    if args.base_url:
        config_kwargs["base_url"] = args.base_url
    if args.log_level:
        config_kwargs["log_level"] = LogLevel(args.log_level)

    try:
        config = get_config(**config_kwargs)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_level)

    try:
        result = asyncio.run(_run(config, args))
    except ConsoleError as e:
        logger.debug(f"Command failed: {e!r}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(_to_json(result), indent=2))
    if args.resource == "health" and not result["healthy"]:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
