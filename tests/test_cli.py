"""Tests for the outliner command-line interface."""

import json

import pytest

from outliner import __version__
from outliner.cli import create_parser, main


@pytest.fixture
def run(tmp_path, monkeypatch, capsys):
    """Invoke the CLI against a snapshot in tmp_path; returns (code, stdout, stderr)."""
    monkeypatch.chdir(tmp_path)
    data_dir = tmp_path / "data"

    def _run(*argv):
        code = main(["--data-dir", str(data_dir), *argv])
        captured = capsys.readouterr()
        return code, captured.out, captured.err

    return _run


class TestParser:
    def test_subcommands(self):
        parser = create_parser()
        args = parser.parse_args(["add", "x", "--parent", "n1"])
        assert args.command == "add"
        assert args.parent == "n1"

    def test_add_placement_is_exclusive(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["add", "x", "--parent", "a", "--after", "b"])


class TestBasics:
    def test_no_command_prints_help(self, run):
        code, out, _ = run()
        assert code == 0
        assert "usage: outliner" in out

    def test_version(self, run):
        code, out, _ = run("version")
        assert code == 0
        assert out.strip() == f"outliner {__version__}"


class TestOutlineCommands:
    def test_add_persists(self, run, tmp_path):
        code, out, _ = run("add", "Groceries")
        assert code == 0
        new_id = out.strip()
        assert (tmp_path / "data" / "outline-projects-v1.json").exists()

        code, out, _ = run("show", "--ids")
        assert code == 0
        assert "# Project 1" in out
        assert f"> Groceries  [{new_id}]" in out
        assert "- (untitled)" in out

    def test_add_nested_and_after(self, run):
        parent = run("add", "Groceries")[1].strip()
        milk = run("add", "Milk", "--parent", parent)[1].strip()
        run("add", "Eggs", "--after", milk)
        out = run("show")[1]
        lines = out.splitlines()
        assert lines.index("- Groceries") < lines.index("  - Milk") < lines.index("  > Eggs")

    def test_add_unknown_parent(self, run):
        code, _, err = run("add", "x", "--parent", "ghost")
        assert code == 1
        assert "unknown parent" in err

    def test_add_after_unknown(self, run):
        code, _, err = run("add", "x", "--after", "ghost")
        assert code == 1

    def test_link_by_reference(self, run):
        run("add", "Groceries")
        run("add", "Milk")
        code, out, _ = run("link", "[[Milk]]", "[[Groceries]]")
        assert code == 0
        assert out.startswith("Linked")
        assert "Milk  -> Groceries" in run("show")[1]

        code, out, _ = run("link", "--remove", "[[Milk]]", "[[Groceries]]")
        assert out.startswith("Unlinked")

    def test_link_unresolved(self, run):
        code, _, err = run("link", "[[Nope]]", "[[Also nope]]")
        assert code == 1
        assert "cannot resolve" in err

    def test_resolve(self, run):
        new_id = run("add", "Groceries")[1].strip()
        assert run("resolve", "[[Groceries]]")[1].strip() == new_id
        code, _, err = run("resolve", "[[Nope]]")
        assert code == 1
        assert "Not found" in err

    def test_edges(self, run):
        run("add", "Groceries")
        code, out, _ = run("edges", "--json")
        assert code == 0
        edges = json.loads(out)
        assert [e["kind"] for e in edges] == ["parent-primary", "sibling"]

        out = run("edges")[1]
        assert "--[sibling]-->" in out

        graph = json.loads(run("edges", "--graph")[1])
        assert len(graph["nodes"]) == 2


    def test_fresh_snapshot_ids_are_stable(self, run, tmp_path):
        first = run("show", "--ids")[1]
        assert (tmp_path / "data" / "outline-projects-v1.json").exists()
        assert run("show", "--ids")[1] == first
        assert run("projects")[1] == run("projects")[1]


class TestProjectCommands:
    def test_new_and_list(self, run):
        code, out, _ = run("projects", "new", "Reading")
        assert code == 0
        pid = out.strip()
        listing = run("projects")[1]
        assert f"* {pid}  Reading" in listing
        assert "Project 1" in listing

    def test_switch_rename_delete(self, run):
        first = run("projects")[1].split()[1]
        second = run("projects", "new")[1].strip()
        assert run("projects", "switch", first)[0] == 0
        assert f"* {first}" in run("projects")[1]
        assert run("projects", "rename", second, "Later")[0] == 0
        assert "Later" in run("projects")[1]
        assert run("projects", "delete", second)[0] == 0
        assert second not in run("projects")[1]

    def test_delete_last_project_fails(self, run):
        only = run("projects")[1].split()[1]
        code, _, err = run("projects", "delete", only)
        assert code == 1
        assert "last project" in err

    def test_unknown_project(self, run):
        code, _, err = run("projects", "switch", "ghost")
        assert code == 1
        assert run("show", "--project", "ghost")[0] == 1


class TestConfigCommands:
    def test_show(self, run):
        code, out, _ = run("config", "show")
        assert code == 0
        assert "[storage]" in out
        assert 'name = "outline-projects-v1"' in out

    def test_path_without_file(self, run):
        code, out, _ = run("config", "path")
        assert code == 1

    def test_explicit_config(self, run, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text('[storage]\nname = "custom"\n')
        run("--config", str(path), "add", "x")
        assert (tmp_path / "data" / "custom.json").exists()

    def test_invalid_config_reports_errors(self, run, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[server]\nport = 0\n")
        code, _, err = run("--config", str(path), "config", "show")
        assert code == 1
        assert "server.port" in err

    def test_completion(self, run):
        code, out, _ = run("completion", "--shell", "fish")
        assert code == 0
        assert "register-python-argcomplete --shell fish outliner" in out
