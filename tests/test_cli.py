"""
Tests for the dolphin-maker command line.
"""
import pytest

from dolphin.cli import main


@pytest.fixture
def run(project):
    """Run the CLI against the miniature project."""
    def _run(*args):
        command, rest = args[0], list(args[1:])
        return main([command, "--root", str(project), *rest])
    return _run


class TestCreatePage:
    """Tests for create-page."""

    def test_yes_skips_prompt(self, run, project, capsys):
        assert run("create-page", "about", "-y") == 0
        assert (project / "src" / "client" / "about" / "index.html").exists()
        out = capsys.readouterr().out
        assert "Created src/client/about/index.html" in out
        assert "Updated vite.config.ts" in out
        assert "Next steps:" in out

    def test_prompt_accepted(self, run, project, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda _: "y")
        assert run("create-page", "about") == 0
        assert (project / "src" / "client" / "about").is_dir()

    def test_prompt_declined(self, run, project, monkeypatch, capsys):
        monkeypatch.setattr("builtins.input", lambda _: "n")
        assert run("create-page", "about") == 0
        assert "Cancelled" in capsys.readouterr().out
        assert not (project / "src" / "client" / "about").exists()

    def test_invalid_name_exits_1(self, run, project, capsys):
        assert run("create-page", "About", "-y") == 1
        assert "Error:" in capsys.readouterr().err
        assert list((project / "src" / "client").iterdir()) == []

    def test_collision_exits_1_before_prompt(self, run, project, monkeypatch, capsys):
        (project / "src" / "client" / "about").mkdir()

        def fail(_):
            raise AssertionError("prompted")
        monkeypatch.setattr("builtins.input", fail)

        assert run("create-page", "about") == 1
        assert "already exists" in capsys.readouterr().err

    def test_unknown_type_exits_1(self, run, capsys):
        assert run("create-page", "about", "--type", "blog", "-y") == 1
        assert "Unknown page type" in capsys.readouterr().err

    def test_dry_run_prints_diff(self, run, project, capsys):
        assert run("create-page", "user-profile", "--type", "dashboard", "--dry-run") == 0
        out = capsys.readouterr().out
        assert "+++ b/src/client/user-profile/index.html" in out
        assert "--- a/src/server/index.ts" in out
        assert not (project / "src" / "client" / "user-profile").exists()

    def test_missing_shard_reports_manual_steps(self, run, project, capsys):
        (project / "src" / "server" / "shard" / "UserShard.ts").unlink()
        assert run("create-page", "notes", "--type", "feed", "-y") == 0
        out = capsys.readouterr().out
        assert "Warning: src/server/shard/UserShard.ts not found" in out
        assert "Manual follow-up required:" in out


    def test_undecodable_collaborator_exits_1(self, run, project, capsys):
        (project / "src" / "server" / "index.ts").write_bytes(b"const app = \xff\xfe;\n")
        assert run("create-page", "stats", "--type", "dashboard", "-y") == 1
        assert "Error: could not read a project file as UTF-8" in capsys.readouterr().err


class TestFeatures:
    """Tests for pricing and ai-assistant."""

    def test_pricing(self, run, project):
        assert run("pricing", "-y") == 0
        assert (project / "src" / "server" / "webhooks" / "stripe.ts").exists()

    def test_pricing_unknown_provider(self, run, capsys):
        assert run("pricing", "--provider", "paypal", "-y") == 1
        assert "Unknown payment provider" in capsys.readouterr().err

    def test_ai_assistant(self, run, project):
        assert run("ai-assistant", "--provider", "ollama", "-y") == 0
        assert "OLLAMA_HOST=" in (project / ".env.example").read_text()


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "create-page" in capsys.readouterr().out
