"""Stdio transport for the uniform transfer MCP tools.

Usage:
    python -m uniform_transfer_server.stdio_server

Environment Variables (required):
    ERP_BASE_URL - ERP gateway base URL
    ERP_API_TOKEN - ERP gateway bearer token
    UNIFORM_DIRECTORY_FILE - JSON export of employees, locations and items

Environment Variables (optional):
    UNIFORM_MCP_EMPLOYEE_ID - Employee the tools act for
    UNIFORM_LOG_LEVEL - Logging level (default: INFO)
    UNIFORM_LOG_FILE - Log file path with rotation
"""

from .server import server


def main():
    """Run the MCP server using stdio transport."""
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
