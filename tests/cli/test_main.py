"""Tests for the phpscope CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from phpscope.cli.main import cli

runner = CliRunner()

DATA_DIR = Path(__file__).parent.parent / "reflection" / "data"


@pytest.fixture
def php_file(tmp_path: Path) -> Path:
    path = tmp_path / "Shop.php"
    path.write_text(
        "<?php\n"
        "namespace Shop;\n"
        "use Vendor\\Money as Cash;\n"
        "const VAT = 20 / 100;\n"
        "class Cart { function total() {} }\n"
    )
    return path


class TestCli:
    """Group options."""

    def test_version(self) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_given_no_command_then_usage(self) -> None:
        result = runner.invoke(cli, [])
        assert "inspect" in result.output
        assert "resolve" in result.output

    def test_given_bad_config_file_then_fails(self, tmp_path: Path) -> None:
        config = tmp_path / "bad.yaml"
        config.write_text("reflection:\n  max_file_size_mb: -1\n")

        result = runner.invoke(cli, ["--config", str(config), "inspect", str(tmp_path)])

        assert result.exit_code == 1
        assert "max_file_size_mb" in result.output


class TestInspectCommand:
    """phpscope inspect tests."""

    def test_given_file_when_inspect_json_then_declarations_listed(self, php_file: Path) -> None:
        """JSON output lists every declaration kind."""
        result = runner.invoke(cli, ["inspect", str(php_file), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["namespaces"] == ["Shop"]
        assert data["use_statements"] == {"Cash": "Vendor\\Money"}
        assert data["constants"] == {"Shop\\VAT": "20 / 100"}
        assert data["classes"] == {"Shop\\Cart": ["total"]}
        assert data["functions"] == []

    def test_given_safe_flag_then_constants_evaluated(self, php_file: Path) -> None:
        result = runner.invoke(cli, ["inspect", str(php_file), "--json", "--safe"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["constants"] == {"Shop\\VAT": 0.2}

    def test_given_file_when_inspect_then_table_printed(self) -> None:
        result = runner.invoke(cli, ["inspect", str(DATA_DIR / "MultiNamespace.php")])

        assert result.exit_code == 0, result.output
        assert "namespace" in result.output
        assert "AggressiveTrait" in result.output
        assert "Babel" in result.output

    def test_given_missing_file_when_inspect_then_fails(self, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["inspect", str(tmp_path / "missing.php")])

        assert result.exit_code == 1
        assert "File not found" in result.output


class TestResolveCommand:
    """phpscope resolve tests."""

    def test_given_alias_when_resolve_then_target_printed(self, php_file: Path) -> None:
        result = runner.invoke(cli, ["resolve", str(php_file), "Cash"])

        assert result.exit_code == 0
        assert result.output.strip() == "Vendor\\Money"

    def test_given_kind_when_resolve_then_restricted(self, php_file: Path) -> None:
        result = runner.invoke(cli, ["resolve", str(php_file), "Cart", "--kind", "class"])
        assert result.output.strip() == "Shop\\Cart"

        result = runner.invoke(cli, ["resolve", str(php_file), "Cart", "--kind", "trait"])
        assert result.exit_code == 1
        assert "Unable to resolve Cart as trait" in result.output

    def test_given_unknown_name_when_resolve_then_exit_code_one(self, php_file: Path) -> None:
        result = runner.invoke(cli, ["resolve", str(php_file), "Nothing"])

        assert result.exit_code == 1
        assert "Unable to resolve Nothing" in result.output
