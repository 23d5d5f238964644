"""
cli/ - Command line interface

Provides read-only graph tooling:
- graph: statistics
- mermaid: diagram source
- order / dependents / validate: checks for a set of enabled components
"""

from .core import (
    CLIContext,
    OutputFormat,
    CommandResult,
    CommandRegistry,
    CLICommand,
    format_output,
)

from .commands import (
    GraphCommand,
    MermaidCommand,
    OrderCommand,
    DependentsCommand,
    ValidateCommand,
    build_registry,
)


__all__ = [
    # Core
    "CLIContext",
    "OutputFormat",
    "CommandResult",
    "CommandRegistry",
    "CLICommand",
    "format_output",
    # Commands
    "GraphCommand",
    "MermaidCommand",
    "OrderCommand",
    "DependentsCommand",
    "ValidateCommand",
    "build_registry",
]
