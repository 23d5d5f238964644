"""
cli/commands.py - CLI command implementations

Read-only views of the dependency graph: statistics, diagrams, execution
order, dependents and relationship checks for a set of enabled components.
"""

from __future__ import annotations
from typing import Dict, List
import argparse

from naascalc.core.state import ComponentState
from naascalc.dependencies.visualization import generate_mermaid_diagram, get_statistics
from .core import CLICommand, CLIContext, CommandRegistry, CommandResult


def _enabled_map(component_types: List[str]) -> Dict[str, ComponentState]:
    return {t: ComponentState(enabled=True) for t in component_types}


def _unknown(ctx: CLIContext, component_types: List[str]) -> List[str]:
    return [t for t in component_types if not ctx.graph.has_component(t)]


class GraphCommand(CLICommand):
    """Summarize the dependency graph."""

    name = "graph"
    description = "Show dependency graph statistics"
    aliases = ["stats"]

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        stats = get_statistics(ctx.graph)
        cycles = stats.pop("circular_dependencies")

        data = dict(stats)
        data["circular_dependencies"] = cycles if ctx.verbose else len(cycles)
        return CommandResult(
            success=True,
            message=f"Dependency graph: {stats['total_components']} components",
            data=data,
        )


class MermaidCommand(CLICommand):
    """Render the graph as a Mermaid diagram."""

    name = "mermaid"
    description = "Print a Mermaid diagram of the graph"

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--enable", "-e", nargs="*", default=None,
                            help="Only draw these components")

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        enabled = None
        if args.enable is not None:
            unknown = _unknown(ctx, args.enable)
            if unknown:
                return CommandResult.failure(f"Unknown component types: {', '.join(unknown)}")
            enabled = _enabled_map(args.enable)

        return CommandResult(success=True, data=generate_mermaid_diagram(ctx.graph, enabled))


class OrderCommand(CLICommand):
    """Execution order for a set of enabled components."""

    name = "order"
    description = "Show the calculation order for enabled components"

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("types", nargs="+", help="Enabled component types")

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        unknown = _unknown(ctx, args.types)
        if unknown:
            return CommandResult.failure(f"Unknown component types: {', '.join(unknown)}")

        order = ctx.graph.get_calculation_order(_enabled_map(args.types))
        acyclic = ctx.graph.is_acyclic(args.types)
        message = "Calculation order" if acyclic else "Calculation order (cycle found, level order used)"
        return CommandResult(success=True, message=message, data=order)


class DependentsCommand(CLICommand):
    """Components recalculated after one changes."""

    name = "dependents"
    description = "List components that depend on a component"

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("type", help="Component type")

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        if not ctx.graph.has_component(args.type):
            return CommandResult.failure(f"Unknown component type: {args.type}")

        dependents = ctx.graph.get_dependents(args.type)
        return CommandResult(
            success=True,
            message=f"{len(dependents)} components depend on {args.type}",
            data=dependents,
        )


class ValidateCommand(CLICommand):
    """Check enabled components against their declared dependencies."""

    name = "validate"
    description = "Validate relationships between enabled components"
    aliases = ["check"]

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--enable", "-e", nargs="+", required=True,
                            help="Enabled component types")

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        report = ctx.graph.validate_relationships(_enabled_map(args.enable))
        if not report.is_valid:
            return CommandResult.failure(
                f"{len(report.errors)} dependency errors",
                data=report.errors + [f"warning: {w}" for w in report.warnings],
            )
        return CommandResult(
            success=True,
            message="Dependencies valid" + (f" ({len(report.warnings)} warnings)" if report.warnings else ""),
            data=report.warnings,
        )


def build_registry() -> CommandRegistry:
    """Registry with every built-in command."""
    registry = CommandRegistry()
    for command in (
        GraphCommand(),
        MermaidCommand(),
        OrderCommand(),
        DependentsCommand(),
        ValidateCommand(),
    ):
        registry.register(command)
    return registry
