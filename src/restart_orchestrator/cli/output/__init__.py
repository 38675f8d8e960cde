"""Centralized CLI output utilities.

Usage:
    from restart_orchestrator.cli.output import OutputFormat, get_formatter

    formatter = get_formatter(OutputFormat.TABLE, console)
    formatter.format_result(result)
"""

from restart_orchestrator.cli.output.formatters import (
    JsonFormatter,
    OutputFormat,
    RestartFormatter,
    TableFormatter,
    YamlFormatter,
    get_formatter,
    result_to_dict,
)

__all__ = [
    "JsonFormatter",
    "OutputFormat",
    "RestartFormatter",
    "TableFormatter",
    "YamlFormatter",
    "get_formatter",
    "result_to_dict",
]
