"""Unit tests for the command line interface."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from tree_service.cli.main import cli
from tree_service.features.trees.projection import NodeView, TreeSummary, TreeView


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_help_lists_command_groups(runner: CliRunner):
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    for group in ("db", "server", "trees"):
        assert group in result.output


def test_server_run_passes_options_to_uvicorn(runner: CliRunner):
    with patch("uvicorn.run") as uvicorn_run:
        result = runner.invoke(cli, ["server", "run", "--port", "9001", "--reload", "--workers", "4"])

    assert result.exit_code == 0
    kwargs = uvicorn_run.call_args.kwargs
    assert uvicorn_run.call_args.args == ("tree_service.app.main:app",)
    assert kwargs["port"] == 9001
    assert kwargs["reload"] is True
    assert kwargs["workers"] is None


class _FakeTreeService:
    def __init__(self, session) -> None:
        self.session = session

    async def list_trees(self):
        return [
            TreeSummary(
                tree_id=1,
                root_name="Company",
                node_count=3,
                max_depth=2,
                created_at=datetime(2026, 1, 1, tzinfo=UTC),
            )
        ]

    async def get_tree(self, tree_id: int):
        root = NodeView(
            id=1,
            name="Company",
            tree_id=tree_id,
            parent_id=None,
            path="1.",
            level=0,
            is_root=True,
            created_at=datetime(2026, 1, 1, tzinfo=UTC),
            children=[],
        )
        return TreeView(tree_id=tree_id, nodes=[root], total_nodes=1, created_at=root.created_at)


@asynccontextmanager
async def _fake_session():
    yield object()


def test_trees_list_json(runner: CliRunner):
    with (
        patch("tree_service.features.trees.service.TreeService", _FakeTreeService),
        patch("tree_service.infra.database.get_async_session", _fake_session),
    ):
        result = runner.invoke(cli, ["trees", "list", "--format", "json"])

    assert result.exit_code == 0
    assert '"root_name": "Company"' in result.stdout


def test_trees_show_prints_nested_nodes(runner: CliRunner):
    with (
        patch("tree_service.features.trees.service.TreeService", _FakeTreeService),
        patch("tree_service.infra.database.get_async_session", _fake_session),
    ):
        result = runner.invoke(cli, ["trees", "show", "1"])

    assert result.exit_code == 0
    assert "- [1] Company  (1.)" in result.stdout


def test_trees_show_rejects_non_positive_id(runner: CliRunner):
    result = runner.invoke(cli, ["trees", "show", "0"])

    assert result.exit_code == 2


def test_db_create_tables_uses_model_metadata(runner: CliRunner):
    calls = []

    async def fake_create_all_tables() -> None:
        calls.append(1)

    with patch("tree_service.infra.database.create_all_tables", fake_create_all_tables):
        result = runner.invoke(cli, ["db", "create-tables"])

    assert result.exit_code == 0
    assert calls == [1]


def test_db_current_reports_alembic_failure(runner: CliRunner):
    class _BrokenCommands:
        async def current(self, *, verbose: bool = False) -> str:
            msg = "alembic.ini not found"
            raise FileNotFoundError(msg)

    with patch("tree_service.cli.commands.database.get_alembic_commands", _BrokenCommands):
        result = runner.invoke(cli, ["db", "current"])

    assert result.exit_code == 1
    assert "Failed to get current revision: alembic.ini not found" in result.output
