"""Tests for the schema CLI commands (generate, interfaces, analyze)."""

import json

from typer.testing import CliRunner

from pocketbase_mcp.cli.main import app

runner = CliRunner()


PRODUCT_SOURCE = """\
interface Product {
  name: string;
  price?: number;
}

type User = {
  username: string;
};
"""


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "pocketbase-mcp version:" in result.output


def test_generate(tmp_path):
    source = tmp_path / "models.ts"
    source.write_text(PRODUCT_SOURCE, encoding="utf-8")

    result = runner.invoke(app, ["schema", "generate", str(source), "--auth", "--timestamps"])

    assert result.exit_code == 0, result.output
    product, user = json.loads(result.stdout)
    assert product["name"] == "product"
    assert [(f["name"], f["required"]) for f in product["fields"]] == [
        ("name", True),
        ("price", False),
        ("created", False),
        ("updated", False),
    ]
    assert [f["name"] for f in user["fields"]] == [
        "username",
        "email",
        "password",
        "created",
        "updated",
    ]


def test_generate_missing_file(tmp_path):
    result = runner.invoke(app, ["schema", "generate", str(tmp_path / "missing.ts")])
    assert result.exit_code == 2


def test_interfaces(pb_server, posts):
    result = runner.invoke(app, ["schema", "interfaces", "posts"])

    assert result.exit_code == 0, result.output
    assert "interface Posts {" in result.output
    assert "  title: string;" in result.output
    assert "  status?: string;" in result.output


def test_interfaces_unknown_collection(pb_server):
    result = runner.invoke(app, ["schema", "interfaces", "ghosts"])
    assert result.exit_code == 1
    assert "Error during schema interfaces" in result.output


def test_analyze(pb_server, posts):
    pb_server.add_collection(
        "notes",
        fields=[{"name": "body", "type": "text"}, {"name": "tag", "type": "text"}],
        records=[{"body": f"note {i}"} for i in range(6)],
    )

    result = runner.invoke(app, ["schema", "analyze", "notes"], env={"COLUMNS": "240"})

    assert result.exit_code == 0, result.output
    assert "notes: 6 of 6 records sampled" in result.output
    assert "100.00%" in result.output
    assert "Field 'body' contains all unique values" in result.output
    assert "Field 'tag' has no values" in result.output


def test_analyze_selected_field(pb_server, posts):
    result = runner.invoke(
        app, ["schema", "analyze", "posts", "-f", "views", "-n", "2"], env={"COLUMNS": "240"}
    )

    assert result.exit_code == 0, result.output
    assert "posts: 2 of 3 records sampled" in result.output
    assert "views" in result.output
    assert "title" not in result.output


def test_analyze_rejects_zero_sample_size(pb_server, posts):
    result = runner.invoke(app, ["schema", "analyze", "posts", "--sample-size", "0"])
    assert result.exit_code == 2
    assert pb_server.requests == []


def test_analyze_missing_collection(pb_server):
    result = runner.invoke(app, ["schema", "analyze", "ghosts"])
    assert result.exit_code == 1
    assert "Error during schema analyze" in result.output


def test_mcp_requires_url(monkeypatch):
    monkeypatch.delenv("POCKETBASE_URL")
    result = runner.invoke(app, ["mcp"])
    assert result.exit_code == 1
    assert "PocketBase URL is required" in result.output
