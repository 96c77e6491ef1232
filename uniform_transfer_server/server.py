"""MCP server for uniform transfers: tool, resource and prompt registration."""

from __future__ import annotations

from fastmcp import FastMCP

from .resources import (
    transfers,
    templates,
    prompts,
)
from .utils.logging import setup_logging

setup_logging()


def create_mcp_server(auth=None):
    """Create and configure the FastMCP server with all tools, resources, and prompts.

    Args:
        auth: Optional FastMCP auth provider
    """
    mcp = FastMCP("uniform-transfers", auth=auth)

    # -- Tools: transfers ---------------------------------------------------
    mcp.tool()(transfers.uniform_transfers)
    mcp.tool()(transfers.uniform_get_transfer)
    mcp.tool()(transfers.uniform_create_transfer)
    mcp.tool()(transfers.uniform_update_transfer)
    mcp.tool()(transfers.uniform_post_transfer)
    mcp.tool()(transfers.uniform_delete_transfer)

    # -- Resources ----------------------------------------------------------
    mcp.resource("uniform://templates/transfer")(templates.resource_transfer_template)

    # -- Prompts ------------------------------------------------------------
    mcp.prompt()(prompts.create_transfer)

    return mcp


# Default server instance for stdio transport
server = create_mcp_server()
