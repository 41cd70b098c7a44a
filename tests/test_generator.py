"""
Tests for generation runs (pages, pricing, AI assistant).
"""
import os
import stat
from pathlib import Path

import pytest

from dolphin.core.errors import CollisionError, MissingCollaboratorWarning, ValidationError
from dolphin.core.generator import (
    generate_ai_assistant,
    generate_page,
    generate_pricing,
    module_specifier,
)
from dolphin.core.patcher import STATUS_CREATED, STATUS_PATCHED, STATUS_UNCHANGED


def snapshot(root: Path) -> dict:
    """Relative path -> bytes for every file under root."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


def test_module_specifier():
    assert module_specifier(Path("/p/src/server"), Path("/p/src/server/middleware/auth.ts")) == "./middleware/auth"
    assert module_specifier(Path("/p/src/client/x"), Path("/p/shared/types/schemas.ts")) == "../../../shared/types/schemas"
    assert module_specifier(Path("/p/src/server"), Path("/p/src/server/shard")) == "./shard"


# =============================================================================
# Pages
# =============================================================================

class TestStaticPage:
    """Tests for static page generation."""

    def test_user_profile(self, config, project):
        result = generate_page("user-profile", "static", config)
        index = project / "src" / "client" / "user-profile" / "index.html"
        assert index.exists()
        assert "User Profile" in index.read_text()
        assert [f.path for f in result.files] == ["src/client/user-profile/index.html"]

        vite = (project / "vite.config.ts").read_text()
        assert '"user-profile": resolve(__dirname, "src/client/user-profile/index.html"),' in vite
        assert [p.status for p in result.patches] == [STATUS_PATCHED]
        assert result.warnings == []

    def test_file_modes(self, config, project):
        os.chmod(project / "vite.config.ts", 0o644)
        old_umask = os.umask(0o022)
        try:
            generate_page("user-profile", "static", config)
        finally:
            os.umask(old_umask)
        index = project / "src" / "client" / "user-profile" / "index.html"
        assert stat.S_IMODE(index.stat().st_mode) == 0o644
        assert stat.S_IMODE((project / "vite.config.ts").stat().st_mode) == 0o644

    def test_static_does_not_touch_server(self, config, project):
        routes_before = config.routes_file.read_bytes()
        generate_page("about", "static", config)
        assert config.routes_file.read_bytes() == routes_before
        assert not config.schemas_file.exists()


class TestDashboardPage:
    """Tests for dashboard page generation."""

    def test_files_and_wiring(self, config, project):
        result = generate_page("user-profile", "dashboard", config)
        page_dir = project / "src" / "client" / "user-profile"
        for name in (
            "index.html",
            "index.tsx",
            "UserProfile.tsx",
            "UserProfileContext.tsx",
            "userProfileEventProcessor.ts",
            "OverviewView.tsx",
            "SettingsView.tsx",
            "UserProfileSkeleton.tsx",
        ):
            assert (page_dir / name).exists(), name

        routes = config.routes_file.read_text()
        assert 'app.get("/api/load/user-profile", authMiddleware' in routes
        assert routes.index("/api/load/user-profile") < routes.index('app.get("*"')
        assert 'import { authMiddleware } from "./middleware/auth";' in routes

        schemas = config.schemas_file.read_text()
        assert schemas.startswith('import { z } from "zod";')
        assert "export type UserProfileEvent = z.infer<typeof userProfileEventSchema>;" in schemas

        assert [p.status for p in result.patches] == [STATUS_PATCHED, STATUS_PATCHED, STATUS_CREATED]
        assert any("loadUserProfile" in step for step in result.next_steps)

    def test_schemas_override(self, config, project):
        config = config.with_overrides(schemas_file="src/shared/types.ts")
        generate_page("metrics", "dashboard", config)
        assert (project / "src" / "shared" / "types.ts").exists()
        assert not (project / "shared").exists()


class TestFeedPage:
    """Tests for feed page generation."""

    def test_files_and_wiring(self, config, project):
        result = generate_page("team-notes", "feed", config)
        page_dir = project / "src" / "client" / "team-notes"
        assert sorted(p.name for p in page_dir.iterdir()) == [
            "TeamNotes.tsx", "index.html", "index.tsx", "useTeamNotesFeed.ts",
        ]

        routes = config.routes_file.read_text()
        assert 'app.get("/api/team-notes/items"' in routes
        assert 'app.post("/api/team-notes/items"' in routes
        assert 'import { getUserShard } from "./shard";' in routes
        assert 'import { teamNotesItemInputSchema } from "../../shared/types/schemas";' in routes

        db_schema = config.db_schema_file.read_text()
        assert 'export const teamNotesItems = sqliteTable("team_notes_items"' in db_schema

        shard = config.user_shard_file.read_text()
        assert "async listTeamNotesItems(" in shard
        assert shard.rstrip().endswith("}")
        assert 'import { teamNotesItems } from "../db/sharded-schema";' in shard
        assert 'import { type TeamNotesItemInput } from "../../../shared/types/schemas";' in shard

        assert result.warnings == []

    def test_methods_go_to_shard_class_not_helper(self, config, project):
        config.user_shard_file.write_text(
            "class RowMapper {\n  map(row) {\n    return row;\n  }\n}\n\n"
            "export class UserShard {\n  async ping() {\n    return 1;\n  }\n}\n"
        )
        generate_page("team-notes", "feed", config)
        shard = config.user_shard_file.read_text()
        assert shard.index("class RowMapper") < shard.index("export class UserShard")
        assert shard.index("async listTeamNotesItems(") > shard.index("export class UserShard")

    def test_missing_user_shard_warns_and_continues(self, config, project):
        config.user_shard_file.unlink()
        result = generate_page("team-notes", "feed", config)
        assert any(isinstance(w, MissingCollaboratorWarning) for w in result.warnings)
        assert any("listTeamNotesItems" in step for step in result.manual_steps)
        assert '"/api/team-notes/items"' in config.routes_file.read_text()


class TestPageGuards:
    """Tests for validation and collision guards."""

    def test_existing_page_collides_and_writes_nothing(self, config, project):
        (project / "src" / "client" / "about").mkdir()
        before = snapshot(project)
        with pytest.raises(CollisionError) as exc:
            generate_page("about", "static", config)
        assert "src/client/about" in str(exc.value)
        assert snapshot(project) == before

    def test_invalid_name_writes_nothing(self, config, project):
        before = snapshot(project)
        with pytest.raises(ValidationError):
            generate_page("User Profile", "dashboard", config)
        assert snapshot(project) == before

    def test_unknown_page_type(self, config):
        with pytest.raises(ValidationError) as exc:
            generate_page("about", "blog", config)
        assert "static, dashboard, feed" in str(exc.value)

    def test_rerun_after_removing_page_leaves_collaborators_identical(self, config, project):
        generate_page("user-profile", "dashboard", config)
        before = snapshot(project)
        for f in (project / "src" / "client" / "user-profile").iterdir():
            f.unlink()
        (project / "src" / "client" / "user-profile").rmdir()

        result = generate_page("user-profile", "dashboard", config)
        assert [p.status for p in result.patches] == [STATUS_UNCHANGED] * 3
        after = snapshot(project)
        for rel in ("vite.config.ts", "src/server/index.ts", "shared/types/schemas.ts"):
            assert after[rel] == before[rel]


class TestDryRun:
    """Tests for dry-run planning."""

    def test_dry_run_writes_nothing(self, config, project):
        before = snapshot(project)
        result = generate_page("user-profile", "dashboard", config, dry_run=True)
        assert snapshot(project) == before
        assert result.dry_run

        diff = result.diff()
        assert "+++ b/src/client/user-profile/UserProfile.tsx" in diff
        assert "--- a/vite.config.ts" in diff
        assert "--- a/src/server/index.ts" in diff
        assert "--- /dev/null\n+++ b/shared/types/schemas.ts" in diff


# =============================================================================
# Features
# =============================================================================

class TestPricing:
    """Tests for pricing setup."""

    def test_stripe(self, config, project):
        result = generate_pricing(config)
        assert (project / "src" / "server" / "webhooks" / "stripe.ts").exists()
        assert (project / "src" / "server" / "pricing" / "index.ts").exists()

        routes = config.routes_file.read_text()
        assert 'import { stripeWebhookRouter } from "./webhooks/stripe";' in routes
        assert routes.index('app.route("/", stripeWebhookRouter);') < routes.index('app.get("*"')

        assert 'sqliteTable("subscriptions"' in config.db_schema_file.read_text()
        assert "STRIPE_SECRET_KEY=" in config.env_example.read_text()
        assert result.warnings == []

    def test_rerun_is_noop_for_collaborators(self, config, project):
        generate_pricing(config)
        routes = config.routes_file.read_bytes()
        result = generate_pricing(config)
        assert [p.status for p in result.patches] == [STATUS_UNCHANGED] * 3
        assert config.routes_file.read_bytes() == routes

    def test_unknown_provider(self, config, project):
        before = snapshot(project)
        with pytest.raises(ValidationError):
            generate_pricing(config, provider="paypal")
        assert snapshot(project) == before


class TestAIAssistant:
    """Tests for AI assistant setup."""

    def test_openai(self, config, project):
        result = generate_ai_assistant(config, model="gpt-4o")
        assert (project / "src" / "server" / "api" / "ai.ts").exists()
        assert (project / "src" / "client" / "utils" / "ai-assistant.ts").exists()

        routes = config.routes_file.read_text()
        assert 'import { aiRouter } from "./api/ai";' in routes
        assert 'app.route("/", aiRouter);' in routes
        assert "AI_MODEL=gpt-4o" in config.env_example.read_text()
        assert result.kind == "ai-assistant"

    def test_unknown_provider(self, config):
        with pytest.raises(ValidationError):
            generate_ai_assistant(config, provider="cohere")
