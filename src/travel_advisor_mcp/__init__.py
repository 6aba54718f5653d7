"""Travel Advisor MCP server with a bounding-box cache and API quota guard."""
