"""
Extracted helper functions from mcp-lnd-server.py for testability.

These pure functions are used by tests without requiring the MCP SDK.
"""

from typing import Any, Dict, Optional

QUERY_TOOL_NAME = "query_channels"
MAX_QUERY_CHARS = 500


def query_tool_schema() -> Dict[str, Any]:
    """JSON schema for the query_channels tool input."""
    return {
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "Natural language query about your Lightning node channels "
                               "(e.g. 'show my channels', 'which channels are unhealthy?')"
            }
        },
        "required": ["query"]
    }


def validate_query_arguments(arguments: Any) -> Optional[str]:
    """Return an error message for bad tool arguments, or None."""
    if not isinstance(arguments, dict):
        return "Arguments must be an object."
    query = arguments.get("query")
    if not isinstance(query, str) or not query.strip():
        return "Missing or invalid 'query' parameter."
    if len(query) > MAX_QUERY_CHARS:
        return f"Query too long (max {MAX_QUERY_CHARS} characters)."
    return None


def normalize_response(result: Any) -> Dict[str, Any]:
    """Normalize a tool response into ok/data or ok/error shape."""
    if isinstance(result, dict) and "error" in result:
        error = result.get("error")
        if isinstance(error, dict):
            error = error.get("message")
        return {"ok": False, "error": error or "Unknown error", "details": result}
    return {"ok": True, "data": result}
