"""
MCP (Model Context Protocol) server for Config Bridge.

Exposes connection checks, raw API requests and change validation for the
configured Zendesk, NetSuite, Salesforce, Jira and Microsoft Security
connections as MCP tools.

Launch:
    python -m config_bridge.mcp_server          # stdio transport
    python -m config_bridge.mcp_server --sse     # SSE transport (HTTP)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from config_bridge.adapters import create_client, get_change_validator
from config_bridge.core.changes_file import load_changes_file, parse_changes_document
from config_bridge.core.config import Config
from config_bridge.core.http_client import AdapterHTTPClient, HTTPError

logger = logging.getLogger("config_bridge.mcp")

# ── Global state ─────────────────────────────────────────────────────────

_config: Config | None = None
_clients: dict[str, AdapterHTTPClient] = {}

_REQUEST_METHODS = ("get", "head", "options", "post", "put", "patch", "delete")


@dataclass
class OperationResult:
    """Result envelope returned by every tool."""

    success: bool
    data: Any = None
    message: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "data": self.data,
            "message": self.message,
            "metadata": self.metadata,
        }


def set_config(config: Config | None) -> None:
    global _config
    _config = config
    _clients.clear()


def _result_to_content(result: OperationResult) -> list[TextContent]:
    """Convert an OperationResult into MCP TextContent."""
    payload = result.to_dict()
    return [TextContent(type="text", text=json.dumps(payload, indent=2, default=str))]


def _require_config() -> Config:
    if _config is None:
        raise RuntimeError("Configuration not loaded. Call bridge_configure first.")
    return _config


async def _get_client(connection: str) -> AdapterHTTPClient:
    """Create, log in and cache a client for *connection*."""
    if connection in _clients:
        return _clients[connection]

    profile = _require_config().get_profile(connection)
    client = create_client(profile)
    await client.ensure_logged_in()
    _clients[connection] = client
    return client


# ── MCP Server definition ───────────────────────────────────────────────

app = Server("config-bridge")


# ---------- Tool definitions ----------


@app.list_tools()
async def list_tools() -> list[Tool]:
    return [
        # -- configuration ------------------------------------------------
        Tool(
            name="bridge_configure",
            description=(
                "Load Config Bridge configuration and list the available "
                "connection profiles. Pass config_path to use a non-default "
                "config file, or omit it to use the default location."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "config_path": {
                        "type": "string",
                        "description": "Path to config YAML/JSON file (optional).",
                    },
                },
            },
        ),
        Tool(
            name="bridge_generate_config",
            description="Return a configuration template with one profile per adapter.",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="bridge_list_connections",
            description="List all configured connection profiles and their adapters.",
            inputSchema={"type": "object", "properties": {}},
        ),
        # -- connections --------------------------------------------------
        Tool(
            name="bridge_check_connection",
            description=(
                "Log in to a configured connection and report whether the "
                "credentials are valid."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "connection": {
                        "type": "string",
                        "description": "Connection profile name (e.g. 'my_zendesk').",
                    },
                },
                "required": ["connection"],
            },
        ),
        Tool(
            name="bridge_raw_request",
            description=(
                "Send a request to the connection's API through the adapter "
                "client, with its retry and rate limit policy."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "connection": {"type": "string"},
                    "method": {
                        "type": "string",
                        "enum": list(_REQUEST_METHODS),
                    },
                    "url": {
                        "type": "string",
                        "description": "Path relative to the connection's base URL.",
                    },
                    "query_params": {"type": "object"},
                    "data": {"description": "Request body for write methods."},
                },
                "required": ["connection", "method", "url"],
            },
        ),
        # -- validation ---------------------------------------------------
        Tool(
            name="bridge_validate_changes",
            description=(
                "Run an adapter's change validators over a changes document. "
                "Pass either the document itself or a path to a YAML/JSON file."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "document": {
                        "type": "object",
                        "description": "Changes document with adapter, elements and changes.",
                    },
                    "path": {"type": "string"},
                    "disabled": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Names of validators to skip.",
                    },
                },
            },
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    try:
        # -- configuration ------------------------------------------------
        if name == "bridge_configure":
            set_config(Config.load(arguments.get("config_path")))
            profiles = _require_config().list_profiles()
            return _result_to_content(OperationResult(
                success=True,
                data={"profiles": profiles},
                message=f"Loaded {len(profiles)} connection profile(s).",
            ))

        if name == "bridge_generate_config":
            return _result_to_content(OperationResult(
                success=True, data=Config.generate_template(), message="Configuration template"
            ))

        if name == "bridge_list_connections":
            if _config is None:
                set_config(Config.load())
            return _result_to_content(OperationResult(
                success=True, data=_require_config().list_profiles()
            ))

        # -- validation ---------------------------------------------------
        if name == "bridge_validate_changes":
            if arguments.get("document") is not None:
                document = parse_changes_document(arguments["document"])
            elif arguments.get("path"):
                document = load_changes_file(arguments["path"])
            else:
                raise ValueError("Either 'document' or 'path' is required")
            validator = get_change_validator(document.adapter, arguments.get("disabled") or [])
            errors = await validator(document.changes, document.elements_source())
            return _result_to_content(OperationResult(
                success=not any(e.severity == "Error" for e in errors),
                data=[e.to_dict() for e in errors],
                message=f"{len(errors)} change error(s)",
            ))

        # -- everything else requires a connection ------------------------
        connection = arguments.get("connection", "")

        if name == "bridge_check_connection":
            client = await _get_client(connection)
            return _result_to_content(OperationResult(
                success=True,
                message=f"Logged in to {client.client_name} via '{connection}'",
                data={"base_url": client.base_url},
            ))

        if name == "bridge_raw_request":
            method = arguments["method"].lower()
            if method not in _REQUEST_METHODS:
                raise ValueError(f"Unsupported method: {arguments['method']!r}")
            client = await _get_client(connection)
            kwargs: dict[str, Any] = {"query_params": arguments.get("query_params")}
            if method in ("post", "put", "patch", "delete"):
                kwargs["data"] = arguments.get("data")
            try:
                response = await getattr(client, method)(arguments["url"], **kwargs)
            except HTTPError as exc:
                return _result_to_content(OperationResult(
                    success=False,
                    data=exc.response.data,
                    message=str(exc),
                    metadata={"status": exc.response.status},
                ))
            return _result_to_content(OperationResult(
                success=True,
                data=response.data,
                metadata={"status": response.status, "headers": response.headers},
            ))

        return _result_to_content(
            OperationResult(success=False, message=f"Unknown tool: {name}")
        )

    except Exception as exc:
        logger.exception("Tool %s failed", name)
        return _result_to_content(
            OperationResult(success=False, message=f"Error: {exc}")
        )


# ── Entry point ──────────────────────────────────────────────────────────


async def run_stdio() -> None:
    """Run the MCP server over stdio."""
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


def serve(sse: bool = False, port: int = 8080) -> None:
    if not sse:
        asyncio.run(run_stdio())
        return

    from mcp.server.sse import SseServerTransport
    from starlette.applications import Starlette
    from starlette.routing import Route

    transport = SseServerTransport("/messages")

    async def handle_sse(request):
        async with transport.connect_sse(
            request.scope, request.receive, request._send
        ) as streams:
            await app.run(streams[0], streams[1], app.create_initialization_options())

    starlette_app = Starlette(
        routes=[
            Route("/sse", endpoint=handle_sse),
            Route("/messages", endpoint=transport.handle_post_message, methods=["POST"]),
        ]
    )

    import uvicorn

    uvicorn.run(starlette_app, host="0.0.0.0", port=port)


def main() -> None:
    parser = argparse.ArgumentParser(description="Config Bridge MCP Server")
    parser.add_argument(
        "--config", type=str, default=None, help="Path to config file"
    )
    parser.add_argument(
        "--sse", action="store_true", help="Run in SSE mode instead of stdio"
    )
    parser.add_argument("--port", type=int, default=8080, help="SSE port")
    args = parser.parse_args()

    if args.config:
        set_config(Config.load(args.config))

    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    serve(sse=args.sse, port=args.port)


if __name__ == "__main__":
    main()
