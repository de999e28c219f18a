"""Tests for chat_viewer/cli.py — commands run in-process."""

import json

import pytest

from chat_viewer.cli import build_parser, run

from conftest import user_record


@pytest.fixture
def env(tmp_path, monkeypatch, write_jsonl, sample_records):
    projects = tmp_path / "projects"
    todos = tmp_path / "todos"
    todos.mkdir()
    write_jsonl(sample_records, name="sess-1.jsonl", directory=projects / "-Users-alice-src-app")
    (todos / "sess-1.json").write_text(
        json.dumps([{"status": "pending", "priority": "high", "content": "Stored task"}]),
        encoding="utf-8",
    )
    monkeypatch.setenv("CLAUDE_PROJECTS_DIR", str(projects))
    monkeypatch.setenv("CLAUDE_TODOS_DIR", str(todos))
    monkeypatch.delenv("CHAT_VIEWER_CONFIG", raising=False)
    return tmp_path


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_render_options(self):
        args = build_parser().parse_args(["render", "x.jsonl", "--todo-background", "dots"])
        assert args.command == "render"
        assert args.todo_theme == "dots"


class TestList:
    def test_lists_conversations(self, env, capsys):
        assert run(["list"]) == 0
        out = capsys.readouterr().out
        assert "~/src/app" in out
        assert "Please add a login page" in out

    def test_search_no_match(self, env, capsys):
        assert run(["list", "--search", "zzz"]) == 0
        assert capsys.readouterr().out == ""

    def test_limit(self, env, write_jsonl, capsys):
        write_jsonl(
            [user_record("Another task", timestamp="2025-06-01T09:00:00Z", sessionId="sess-2")],
            name="sess-2.jsonl",
            directory=env / "projects" / "-Users-alice-src-other",
        )
        assert run(["list", "--limit", "1"]) == 0
        captured = capsys.readouterr()
        assert "Another task" in captured.out
        assert "Please add a login page" not in captured.out
        assert "1 conversation(s)" in captured.err

    @pytest.mark.parametrize("limit", ["0", "-3"])
    def test_non_positive_limit(self, env, capsys, limit):
        assert run(["list", "--limit", limit]) == 1
        assert "--limit must be a positive integer" in capsys.readouterr().err

    def test_missing_projects_dir(self, env, monkeypatch, capsys):
        monkeypatch.setenv("CLAUDE_PROJECTS_DIR", str(env / "absent"))
        assert run(["list"]) == 1
        assert "Projects directory not found" in capsys.readouterr().err


class TestShow:
    def test_summary_and_stored_todos(self, env, capsys):
        assert run(["show", "sess-1"]) == 0
        out = capsys.readouterr().out
        assert "Session:  sess-1" in out
        assert "Stored task" in out

    def test_unknown_session(self, env, capsys):
        assert run(["show", "nope"]) == 1
        assert "No conversation matches 'nope'" in capsys.readouterr().err


class TestRender:
    def test_render_by_session_id(self, env, capsys):
        out_dir = env / "html"
        assert run(["render", "sess-1", "--output-dir", str(out_dir)]) == 0
        out = capsys.readouterr().out
        assert "7 messages processed" in out
        assert len(list(out_dir.glob("claude-conversation-*.html"))) == 1

    def test_render_by_path(self, env, write_jsonl, capsys):
        path = write_jsonl([user_record("direct file")], name="direct.jsonl")
        assert run(["render", str(path), "--output-dir", str(env / "out")]) == 0
        assert "1 messages processed" in capsys.readouterr().out

    def test_invalid_theme(self, env, capsys):
        assert run(["render", "sess-1", "--todo-background", "neon"]) == 1
        err = capsys.readouterr().err
        assert "Invalid TODO theme: neon" in err
        assert "grid" in err

    def test_config_error(self, env, tmp_path, capsys):
        bad = tmp_path / "bad.yaml"
        bad.write_text("output:\n  todo_theme: neon\n", encoding="utf-8")
        assert run(["--config", str(bad), "list"]) == 1
        assert "Invalid configuration" in capsys.readouterr().err
