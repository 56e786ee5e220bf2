"""Skills - tool and slash-command entry points."""

from .history_router import TOOLS, ToolResult, execute_tool, handle_history_command

__all__ = ["TOOLS", "ToolResult", "execute_tool", "handle_history_command"]
