"""
Pytest configuration and fixtures.
"""
import os
import sys

import pytest
from fastapi.testclient import TestClient

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dolphin.api.pages import get_config
from dolphin.core.config import ProjectConfig
from main import app


VITE_CONFIG = '''import { defineConfig } from "vite";
import solid from "vite-plugin-solid";
import { resolve } from "path";

export default defineConfig({
  plugins: [solid()],
  build: {
    rollupOptions: {
      input: {
        main: resolve(__dirname, "index.html"),
      },
    },
  },
});
'''

ROUTES_FILE = '''import { Hono } from "hono";
import { serveStatic } from "hono/bun";

const app = new Hono();

app.get("/api/health", (c) => c.json({ ok: true }));

app.get("*", serveStatic({ path: "./dist/index.html" }));

export default app;
'''

USER_SHARD = '''import { drizzle } from "drizzle-orm/d1";

export class UserShard {
  constructor(private db: ReturnType<typeof drizzle>) {}

  async ping() {
    return "pong";
  }
}
'''


@pytest.fixture
def project(tmp_path):
    """A miniature target project with the default layout."""
    (tmp_path / "vite.config.ts").write_text(VITE_CONFIG)
    server = tmp_path / "src" / "server"
    (server / "shard").mkdir(parents=True)
    (server / "index.ts").write_text(ROUTES_FILE)
    (server / "shard" / "UserShard.ts").write_text(USER_SHARD)
    (tmp_path / "src" / "client").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def config(project):
    """Project configuration rooted at the miniature project."""
    return ProjectConfig.for_root(project)


@pytest.fixture
def client(config):
    """Create a test client editing the miniature project."""
    app.dependency_overrides[get_config] = lambda: config
    yield TestClient(app)
    app.dependency_overrides.clear()
