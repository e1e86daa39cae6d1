"""CLI integration tests using Click's CliRunner."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from domo.cli import cli
from domo.storage.database import Database
from domo.storage.models import ConversationDetail
from domo.storage.repository import Repository


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    monkeypatch.delenv("DOMO_DB_PATH", raising=False)
    return tmp_path / "data" / "domo.db"


def _invoke(runner, db_path, *args):
    return runner.invoke(cli, ["--db", str(db_path), *args])


def _first_demo_id(db_path):
    with Database(db_path) as db:
        return Repository(db).list_demos()[0].id


class TestHelpCommands:
    def test_main_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Domo" in result.output

    def test_demo_help(self, runner):
        result = runner.invoke(cli, ["demo", "--help"])
        assert result.exit_code == 0
        assert "add-video" in result.output


class TestInitDb:
    def test_creates_database(self, runner, db_path):
        result = _invoke(runner, db_path, "init-db")
        assert result.exit_code == 0
        assert db_path.exists()


class TestDemoCommands:
    def test_create_and_list(self, runner, db_path):
        result = _invoke(runner, db_path, "demo", "create", "Acme", "--cta-url", "https://acme.example.com")
        assert result.exit_code == 0
        assert "Created demo" in result.output

        result = _invoke(runner, db_path, "demo", "list")
        assert result.exit_code == 0
        assert "Acme" in result.output

    def test_list_empty(self, runner, db_path):
        result = _invoke(runner, db_path, "demo", "list")
        assert "No demos yet" in result.output

    def test_add_video_with_context(self, runner, db_path, tmp_path, sample_context):
        _invoke(runner, db_path, "demo", "create", "Acme")
        demo_id = _first_demo_id(db_path)
        context_file = tmp_path / "tour.md"
        context_file.write_text(sample_context)

        result = _invoke(
            runner, db_path, "demo", "add-video", demo_id, "Product Tour",
            "--url", "https://cdn.example.com/tour.mp4", "--context-file", str(context_file),
        )
        assert result.exit_code == 0
        assert "Added video" in result.output

        with Database(db_path) as db:
            video = Repository(db).get_demo_video(demo_id, "Product Tour")
        assert video.storage_url == "https://cdn.example.com/tour.mp4"
        assert video.generated_context == sample_context

    def test_add_video_unknown_demo(self, runner, db_path):
        result = _invoke(runner, db_path, "demo", "add-video", "missing", "Tour")
        assert result.exit_code == 1
        assert "Unknown demo" in result.output

    def test_link_conversation(self, runner, db_path):
        _invoke(runner, db_path, "demo", "create", "Acme")
        demo_id = _first_demo_id(db_path)

        result = _invoke(runner, db_path, "demo", "link-conversation", demo_id, "conv-abc", "--name", "Inbound")
        assert result.exit_code == 0
        assert "Linked conversation" in result.output
        assert "Inbound" in result.output

        with Database(db_path) as db:
            repo = Repository(db)
            assert repo.get_demo(demo_id).tavus_conversation_id == "conv-abc"
            assert repo.get_conversation("conv-abc").demo_id == demo_id

    def test_link_conversation_unknown_demo(self, runner, db_path):
        result = _invoke(runner, db_path, "demo", "link-conversation", "missing", "conv-abc")
        assert result.exit_code == 1
        assert "Unknown demo" in result.output

    def test_link_conversation_owned_elsewhere(self, runner, db_path):
        _invoke(runner, db_path, "demo", "create", "First")
        first = _first_demo_id(db_path)
        _invoke(runner, db_path, "demo", "link-conversation", first, "conv-abc")
        _invoke(runner, db_path, "demo", "create", "Second")
        with Database(db_path) as db:
            second = next(d.id for d in Repository(db).list_demos() if d.id != first)

        result = _invoke(runner, db_path, "demo", "link-conversation", second, "conv-abc")
        assert result.exit_code == 1
        assert "already belongs" in result.output


class TestReportCommands:
    @pytest.fixture
    def demo_with_conversation(self, db_path):
        with Database(db_path) as db:
            repo = Repository(db)
            demo = repo.create_demo("Acme", demo_id="demo-1")
            repo.insert_conversation(ConversationDetail(
                demo_id=demo.id, tavus_conversation_id="conv-1", conversation_name="Intro",
            ))
            repo.upsert_qualification({
                "conversation_id": "conv-1", "email": "ada@example.com",
                "received_at": "2024-05-01T10:00:00+00:00",
            })
        return "demo-1"

    def test_report(self, runner, db_path, demo_with_conversation):
        result = _invoke(runner, db_path, "report", demo_with_conversation)
        assert result.exit_code == 0
        assert "Intro" in result.output
        assert "Contacts captured" in result.output

    def test_report_unknown_demo(self, runner, db_path):
        result = _invoke(runner, db_path, "report", "missing")
        assert result.exit_code == 1

    def test_score(self, runner, db_path, demo_with_conversation):
        result = _invoke(runner, db_path, "score", demo_with_conversation, "conv-1")
        assert result.exit_code == 0
        assert "Poor" in result.output
        assert "Contact confirmation" in result.output


class TestChaptersCommand:
    def test_lists_chapters(self, runner, tmp_path, sample_context):
        context_file = tmp_path / "tour.md"
        context_file.write_text(sample_context)
        result = runner.invoke(cli, ["chapters", str(context_file), "--at", "60"])
        assert result.exit_code == 0
        assert "Welcome" in result.output
        assert "Dashboard overview" in result.output

    def test_no_chapters(self, runner, tmp_path):
        context_file = tmp_path / "empty.md"
        context_file.write_text("# Nothing here")
        result = runner.invoke(cli, ["chapters", str(context_file)])
        assert "No chapters found" in result.output


class TestServeCommand:
    @pytest.fixture
    def captured(self, monkeypatch):
        import uvicorn

        calls = []
        monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
        return calls

    def test_reload_exports_db_override(self, runner, db_path, captured, monkeypatch):
        import os

        # Registered so the value the command sets is removed after the test
        monkeypatch.setenv("DOMO_DB_PATH", "placeholder")
        monkeypatch.delenv("DOMO_DB_PATH")

        result = _invoke(runner, db_path, "serve", "--reload")
        assert result.exit_code == 0
        app, kwargs = captured[0]
        assert app == "domo.web.app:create_app"
        assert kwargs["reload"] is True
        assert kwargs["factory"] is True
        assert os.environ["DOMO_DB_PATH"] == str(db_path)

    def test_serve_builds_app_from_config(self, runner, db_path, captured):
        from fastapi import FastAPI

        result = _invoke(runner, db_path, "serve", "--port", "9001")
        assert result.exit_code == 0
        app, kwargs = captured[0]
        assert isinstance(app, FastAPI)
        assert app.state.config.db_path == db_path
        assert kwargs["port"] == 9001
