"""
Govee MCP server package.

    # stdio (Claude Desktop / Cursor)
    python -m govee_mcp.mcp.govee_server
"""
