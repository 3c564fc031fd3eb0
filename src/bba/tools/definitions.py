"""Tool schemas — the wire contract between the agent loop and the model.

Each dict follows the OpenAI function-calling shape LiteLLM accepts for
every provider::

    {"type": "function", "function": {"name", "description", "parameters"}}
"""

from __future__ import annotations

from typing import Any

LIST_DIR = "list_dir"
FILE_READ = "file_read"
GREP_SEARCH = "grep_search"
UPDATE_BLACKBOARD = "update_blackboard"

MAX_LIST_DEPTH = 5
DEFAULT_LIST_DEPTH = 3
DEFAULT_MAX_RESULTS = 50


def _function(name: str, description: str, properties: dict[str, Any], required: list[str]) -> dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


TOOLS: list[dict[str, Any]] = [
    _function(
        LIST_DIR,
        "List files and directories at a given path. Useful for exploring the codebase "
        "structure. Automatically filters out common build artifacts and hidden files.",
        {
            "path": {
                "type": "string",
                "description": "Path to list (relative to target directory or absolute)",
            },
            "max_depth": {
                "type": "integer",
                "description": f"Maximum depth to traverse (default: {DEFAULT_LIST_DEPTH}, max: {MAX_LIST_DEPTH})",
                "default": DEFAULT_LIST_DEPTH,
            },
        },
        ["path"],
    ),
    _function(
        FILE_READ,
        "Read the contents of a file with line numbers. For large files, you can "
        "specify a line range.",
        {
            "path": {"type": "string", "description": "Path to the file to read"},
            "start_line": {
                "type": "integer",
                "description": "Starting line number (1-indexed, optional)",
            },
            "end_line": {
                "type": "integer",
                "description": "Ending line number (inclusive, optional)",
            },
        },
        ["path"],
    ),
    _function(
        GREP_SEARCH,
        "Search for a pattern (regex) across files in the codebase. Returns file paths, "
        "line numbers, and matching lines.",
        {
            "pattern": {"type": "string", "description": "Regular expression pattern to search for"},
            "path": {"type": "string", "description": "Path to search in (file or directory)"},
            "max_results": {
                "type": "integer",
                "description": f"Maximum number of results to return (default: {DEFAULT_MAX_RESULTS})",
                "default": DEFAULT_MAX_RESULTS,
            },
        },
        ["pattern", "path"],
    ),
    _function(
        UPDATE_BLACKBOARD,
        "Update a section of the blackboard with important findings. Use this to save key "
        "insights, patterns, or information you want to remember. Be concise and strategic "
        "with the available token budget.",
        {
            "section": {
                "type": "string",
                "description": "Section name for organizing your findings (e.g., overview, "
                "architecture, patterns). You can use any name that makes sense for your analysis.",
            },
            "content": {"type": "string", "description": "Content to add to the section"},
            "replace": {
                "type": "boolean",
                "description": "If true, replace the section content. If false, append to "
                "existing content. Default: false",
                "default": False,
            },
        },
        ["section", "content"],
    ),
]


def tool_name(schema: dict[str, Any]) -> str:
    name: str = schema["function"]["name"]
    return name


def tool_parameters(schema: dict[str, Any]) -> list[str]:
    """Return the parameter names declared by *schema*, in order."""
    properties: dict[str, Any] = schema["function"].get("parameters", {}).get("properties", {})
    return list(properties)
