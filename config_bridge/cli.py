"""
CLI for Config Bridge.

Provides commands for:
  - Generating configuration templates
  - Testing connections (client login)
  - Running an adapter's change validators over a changes file
  - Running the MCP server
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from config_bridge.core.config import Config


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


async def _cmd_init(args: argparse.Namespace) -> None:
    """Generate a template config file."""
    template = Config.generate_template()
    dest = Path(args.output).expanduser()
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(template)
    print(f"Configuration template written to {dest}")
    print("Edit the file with your connection details, then run:")
    print(f"  config-bridge test --config {dest}")


async def _cmd_test(args: argparse.Namespace) -> None:
    """Log in to every configured connection."""
    from config_bridge.adapters import ADAPTER_REGISTRY, create_client

    config = Config.load(args.config)
    profiles = config.list_profiles()

    if not profiles:
        print("No connection profiles found in config.")
        sys.exit(1)

    print(f"Testing {len(profiles)} connection(s)...\n")

    failed = False
    for p in profiles:
        profile = config.get_profile(p["name"])
        if profile.adapter not in ADAPTER_REGISTRY:
            print(f"  [{p['name']}] SKIP - unknown adapter: {profile.adapter}")
            continue

        client = create_client(profile)
        try:
            await client.ensure_logged_in()
            print(f"  [{p['name']}] ({profile.adapter}) OK")
        except Exception as exc:
            failed = True
            print(f"  [{p['name']}] ({profile.adapter}) FAIL - {exc}")
        finally:
            await client.close()

    if failed:
        sys.exit(1)


async def _cmd_validate(args: argparse.Namespace) -> None:
    """Run change validators over a changes file."""
    from config_bridge.adapters import get_change_validator
    from config_bridge.core.changes_file import load_changes_file

    document = load_changes_file(args.changes)
    disabled: list[str] = list(args.disable or [])
    if args.connection:
        profile = Config.load(args.config).get_profile(args.connection)
        if profile.adapter != document.adapter:
            print(
                f"Connection {args.connection!r} is a {profile.adapter} connection, "
                f"changes are for {document.adapter}"
            )
            sys.exit(1)
        disabled += profile.disabled_validators

    validator = get_change_validator(document.adapter, disabled)
    errors = await validator(document.changes, document.elements_source())
    _print_json([e.to_dict() for e in errors])

    if any(e.severity == "Error" for e in errors):
        sys.exit(2)


def _cmd_serve(args: argparse.Namespace) -> None:
    """Start the MCP server."""
    from config_bridge.mcp_server import serve, set_config

    if args.config:
        set_config(Config.load(args.config))
    serve(sse=args.sse, port=args.port)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="config-bridge",
        description="Config Bridge - configuration adapters for Zendesk, NetSuite, Salesforce, Jira, Entra",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # -- init --
    p_init = sub.add_parser("init", help="Generate a configuration template")
    p_init.add_argument(
        "-o", "--output",
        default="~/.config-bridge/config.yaml",
        help="Output path for the config file",
    )

    # -- test --
    p_test = sub.add_parser("test", help="Log in to all configured connections")
    p_test.add_argument("--config", type=str, default=None)

    # -- validate --
    p_val = sub.add_parser("validate", help="Run change validators over a changes file")
    p_val.add_argument("changes", help="YAML/JSON changes document")
    p_val.add_argument("--config", type=str, default=None)
    p_val.add_argument(
        "-c", "--connection", default=None,
        help="Connection profile whose disabled validators apply",
    )
    p_val.add_argument(
        "--disable", action="append", default=None, help="Validator to skip (repeatable)"
    )

    # -- serve --
    p_serve = sub.add_parser("serve", help="Start the MCP server")
    p_serve.add_argument("--config", type=str, default=None)
    p_serve.add_argument("--sse", action="store_true")
    p_serve.add_argument("--port", type=int, default=8080)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING, stream=sys.stderr
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    dispatch = {
        "init": _cmd_init,
        "test": _cmd_test,
        "validate": _cmd_validate,
    }

    if args.command == "serve":
        _cmd_serve(args)
        return

    try:
        asyncio.run(dispatch[args.command](args))
    except (KeyError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
