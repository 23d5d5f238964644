"""
cli/core.py - Core CLI infrastructure
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from enum import Enum
from abc import ABC, abstractmethod
import argparse
import json
import logging

from naascalc.dependencies.graph import DependencyGraph

logger = logging.getLogger("cli")


class OutputFormat(Enum):
    """Output format options."""
    TEXT = "text"
    JSON = "json"


@dataclass
class CLIContext:
    """Context for CLI operations."""

    graph: DependencyGraph = field(default_factory=DependencyGraph)
    output_format: OutputFormat = OutputFormat.TEXT
    verbose: bool = False


@dataclass
class CommandResult:
    """Result of a CLI command execution."""

    success: bool = True
    message: str = ""
    data: Any = None
    error: Optional[str] = None
    exit_code: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "data": self.data,
            "error": self.error,
        }

    @classmethod
    def failure(cls, error: str, data: Any = None) -> "CommandResult":
        return cls(success=False, error=error, data=data, exit_code=1)


class CLICommand(ABC):
    """Base class for CLI commands."""

    name: str = "command"
    description: str = "Base command"
    aliases: List[str] = []

    @abstractmethod
    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        """Execute the command."""
        pass

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        """Configure argument parser for this command."""
        pass


class CommandRegistry:
    """Registry for CLI commands."""

    def __init__(self):
        self._commands: Dict[str, CLICommand] = {}
        self._aliases: Dict[str, str] = {}

    def register(self, command: CLICommand) -> None:
        self._commands[command.name] = command
        for alias in command.aliases:
            self._aliases[alias] = command.name

    def get(self, name: str) -> Optional[CLICommand]:
        """Get command by name or alias."""
        if name in self._commands:
            return self._commands[name]
        if name in self._aliases:
            return self._commands[self._aliases[name]]
        return None

    def list_commands(self) -> List[str]:
        return list(self._commands.keys())

    def get_all(self) -> Dict[str, CLICommand]:
        return dict(self._commands)


def format_output(result: CommandResult, format: OutputFormat) -> str:
    """Format command result for display."""
    if format == OutputFormat.JSON:
        return json.dumps(result.to_dict(), indent=2, default=str)

    if not result.success:
        output = f"Error: {result.error}"
        if isinstance(result.data, list):
            for item in result.data:
                output += f"\n  - {item}"
        return output

    output = result.message
    if isinstance(result.data, dict):
        for k, v in result.data.items():
            output += f"\n  {k}: {v}"
    elif isinstance(result.data, list):
        for item in result.data:
            output += f"\n  {item}"
    elif result.data:
        output = f"{output}\n{result.data}" if output else str(result.data)
    return output
