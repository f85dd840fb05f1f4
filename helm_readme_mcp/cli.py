"""CLI argument parsing and main entry point.

Provides two modes of operation:

* ``helm-readme-mcp serve``: run the MCP server (stdio or SSE).
* ``helm-readme-mcp search|info|readme``: run one tool and print its JSON.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional

import uvicorn

from helm_readme_mcp.config import HelmReadmeConfig, find_config_file, load_config
from helm_readme_mcp.constants import SERVER_NAME, SERVER_VERSION
from helm_readme_mcp.display.logging_config import setup_logging
from helm_readme_mcp.errors import ConfigurationError, HelmReadmeError
from helm_readme_mcp.server.handlers import INFO_TOOL_NAME, README_TOOL_NAME, SEARCH_TOOL_NAME

module_logger = logging.getLogger(__name__)

_LOG_LEVEL_CHOICES = ["debug", "info", "warning", "error", "critical"]


def _load_config(args: argparse.Namespace) -> HelmReadmeConfig:
    """Resolve config path (flag → env var → auto-detect) and apply CLI overrides."""
    config_path = getattr(args, "config", None) or find_config_file()
    try:
        config = load_config(config_path)
    except ConfigurationError as e_cfg:
        print(f"Error: {e_cfg.message}", file=sys.stderr)
        sys.exit(2)

    server = config.server
    updates: Dict[str, Any] = {}
    for key in ("transport", "host", "port"):
        value = getattr(args, key, None)
        if value is not None:
            updates[key] = value
    if updates:
        config = config.model_copy(update={"server": server.model_copy(update=updates)})
    log_level = getattr(args, "log_level", None)
    if log_level:
        config = config.model_copy(
            update={"logging": config.logging.model_copy(update={"level": log_level.upper()})}
        )
    return config


# ── ``helm-readme-mcp serve`` ────────────────────────────────────────────


def _cmd_serve(args: argparse.Namespace) -> None:
    """Entry-point for ``helm-readme-mcp serve``."""
    config = _load_config(args)
    log_fpath, log_lvl = setup_logging(config.logging.level)

    from helm_readme_mcp.server.app import create_app, serve_stdio
    from helm_readme_mcp.tools import ToolContext

    module_logger.info(
        "---- %s v%s starting (transport: %s, log level: %s, log file: %s) ----",
        SERVER_NAME,
        SERVER_VERSION,
        config.server.transport,
        log_lvl,
        log_fpath,
    )
    ctx = ToolContext.from_config(config)

    try:
        if config.server.transport == "sse":
            uvicorn_cfg = uvicorn.Config(
                app=create_app(ctx),
                host=config.server.host,
                port=config.server.port,
                log_config=None,
                log_level=log_lvl.lower() if log_lvl == "DEBUG" else "warning",
            )
            module_logger.info(
                "Preparing to start Uvicorn server: http://%s:%s",
                config.server.host,
                config.server.port,
            )
            uvicorn.Server(uvicorn_cfg).run()
        else:
            asyncio.run(serve_stdio(ctx))
    except KeyboardInterrupt:
        module_logger.info("%s interrupted by KeyboardInterrupt.", SERVER_NAME)
    except Exception as e_fatal:
        module_logger.exception(
            "%s encountered an uncaught fatal error: %s",
            SERVER_NAME,
            e_fatal,
        )
        sys.exit(1)
    finally:
        module_logger.info("%s has shut down.", SERVER_NAME)


# ── one-shot tool commands ───────────────────────────────────────────────


async def _run_tool(config: HelmReadmeConfig, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
    from helm_readme_mcp.server.handlers import dispatch_tool
    from helm_readme_mcp.tools import ToolContext

    ctx = ToolContext.from_config(config)
    try:
        return await dispatch_tool(ctx, name, arguments)
    finally:
        await ctx.close()


def _cmd_tool(args: argparse.Namespace, name: str, arguments: Dict[str, Any]) -> None:
    config = _load_config(args)
    setup_logging(config.logging.level)
    try:
        result = asyncio.run(_run_tool(config, name, arguments))
    except HelmReadmeError as e_tool:
        print(json.dumps({"error": e_tool.to_dict()}, indent=2), file=sys.stderr)
        sys.exit(1)
    print(json.dumps(result, indent=2))


def _cmd_search(args: argparse.Namespace) -> None:
    arguments: Dict[str, Any] = {"query": args.query, "limit": args.limit}
    _cmd_tool(args, SEARCH_TOOL_NAME, arguments)


def _cmd_info(args: argparse.Namespace) -> None:
    arguments = {
        "package_name": args.package_name,
        "include_dependencies": not args.no_dependencies,
    }
    _cmd_tool(args, INFO_TOOL_NAME, arguments)


def _cmd_readme(args: argparse.Namespace) -> None:
    arguments = {
        "package_name": args.package_name,
        "version": args.version,
        "include_examples": not args.no_examples,
    }
    _cmd_tool(args, README_TOOL_NAME, arguments)


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        metavar="PATH",
        help=(
            "Path to configuration file (YAML). "
            "Default: $HELM_README_CONFIG, then auto-detect config.yaml/config.yml"
        ),
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=_LOG_LEVEL_CHOICES,
        help="Set logging level (default: from config, else info)",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser with serve/search/info/readme subcommands."""
    parser = argparse.ArgumentParser(
        prog="helm-readme-mcp",
        description=f"{SERVER_NAME} v{SERVER_VERSION}",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {SERVER_VERSION}")

    subparsers = parser.add_subparsers(dest="command")

    # ── serve ───────────────────────────────────────────────────
    sp_serve = subparsers.add_parser("serve", help="Run the MCP server")
    sp_serve.add_argument(
        "--transport",
        type=str,
        default=None,
        choices=["stdio", "sse"],
        help="MCP transport (default: from config, else stdio)",
    )
    sp_serve.add_argument("--host", type=str, default=None, help="Host address for SSE")
    sp_serve.add_argument("--port", type=int, default=None, help="Port for SSE")
    _add_common_args(sp_serve)
    sp_serve.set_defaults(func=_cmd_serve)

    # ── search ──────────────────────────────────────────────────
    sp_search = subparsers.add_parser("search", help="Search Helm charts and print JSON")
    sp_search.add_argument("query", help="Search query")
    sp_search.add_argument("--limit", type=int, default=20, help="Maximum results (default: 20)")
    _add_common_args(sp_search)
    sp_search.set_defaults(func=_cmd_search)

    # ── info ────────────────────────────────────────────────────
    sp_info = subparsers.add_parser("info", help="Show chart metadata as JSON")
    sp_info.add_argument("package_name", help="Chart in 'repo/chart' form")
    sp_info.add_argument(
        "--no-dependencies",
        action="store_true",
        default=False,
        help="Skip dependency lookup",
    )
    _add_common_args(sp_info)
    sp_info.set_defaults(func=_cmd_info)

    # ── readme ──────────────────────────────────────────────────
    sp_readme = subparsers.add_parser("readme", help="Show chart README and examples as JSON")
    sp_readme.add_argument("package_name", help="Chart in 'repo/chart' form")
    sp_readme.add_argument("--chart-version", dest="version", default="latest", help="Chart version")
    sp_readme.add_argument(
        "--no-examples",
        action="store_true",
        default=False,
        help="Skip usage example extraction",
    )
    _add_common_args(sp_readme)
    sp_readme.set_defaults(func=_cmd_readme)

    return parser


def main(argv: Optional[list] = None) -> None:
    """Program entry point: parse arguments and dispatch to subcommand."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)
    else:
        args.func(args)


if __name__ == "__main__":
    main()
