"""Tree inspection commands.

Example:bash
    # One line per tree
    tree-service trees list

    # Nested view of tree 1
    tree-service trees show 1
    tree-service trees show 1 --format json
"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict
from typing import TYPE_CHECKING

import click

from tree_service.cli.utils import coro, error, header, info, section

if TYPE_CHECKING:
    from tree_service.features.trees.projection import NodeView


def _print_node(node: NodeView, indent: int = 0) -> None:
    click.echo(f"{'  ' * indent}- [{node.id}] {node.name}  ({node.path})")
    for child in node.children or []:
        _print_node(child, indent + 1)


@click.group(name="trees")
def trees() -> None:
    """Inspect stored trees."""


@trees.command(name="list")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@coro
async def list_trees(output_format: str) -> None:
    """List every tree with its root, size and depth."""
    from tree_service.features.trees.service import TreeService
    from tree_service.infra.database import get_async_session

    try:
        async with get_async_session() as session:
            summaries = await TreeService(session).list_trees()
    except Exception as e:
        error(f"Failed to list trees: {e}")
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps([asdict(s) for s in summaries], indent=2, default=str))
        return

    header("Trees")
    if not summaries:
        info("No trees found")
        return

    click.echo(f"  {'ID':>6}  {'Nodes':>6}  {'Depth':>5}  {'Created':<26}  Root")
    for s in summaries:
        click.echo(
            f"  {s.tree_id:>6}  {s.node_count:>6}  {s.max_depth:>5}  "
            f"{s.created_at.isoformat():<26}  {s.root_name}"
        )


@trees.command(name="show")
@click.argument("tree_id", type=click.IntRange(min=1))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["tree", "json"]),
    default="tree",
    help="Output format",
)
@coro
async def show_tree(tree_id: int, output_format: str) -> None:
    """Print tree TREE_ID with its nodes nested under the root."""
    from tree_service.core.exceptions import AppException
    from tree_service.features.trees.service import TreeService
    from tree_service.infra.database import get_async_session

    try:
        async with get_async_session() as session:
            tree = await TreeService(session).get_tree(tree_id)
    except AppException as e:
        error(e.detail)
        sys.exit(1)
    except Exception as e:
        error(f"Failed to load tree {tree_id}: {e}")
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps(asdict(tree), indent=2, default=str))
        return

    section(f"Tree {tree.tree_id} ({tree.total_nodes} nodes)")
    for node in tree.nodes:
        _print_node(node)
