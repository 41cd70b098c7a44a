"""
Project configuration from environment variables.
All paths are optional with defaults matching the template project layout.
"""
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

DEFAULT_VITE_CONFIG = "vite.config.ts"
DEFAULT_ROUTES_FILE = "src/server/index.ts"
DEFAULT_SCHEMAS_FILE = "shared/types/schemas.ts"
DEFAULT_DB_SCHEMA_FILE = "src/server/db/sharded-schema.ts"
DEFAULT_USER_SHARD_FILE = "src/server/shard/UserShard.ts"
DEFAULT_CLIENT_DIR = "src/client"
DEFAULT_SERVER_DIR = "src/server"
DEFAULT_ENV_EXAMPLE = ".env.example"


@dataclass(frozen=True)
class ProjectConfig:
    """Paths of one target project (immutable, absolute)."""
    root: Path
    vite_config: Path
    routes_file: Path
    schemas_file: Path
    db_schema_file: Path
    user_shard_file: Path
    client_dir: Path
    server_dir: Path
    env_example: Path

    @classmethod
    def for_root(cls, root: "os.PathLike[str] | str") -> "ProjectConfig":
        """Build a config using the default layout under ``root``."""
        root_path = Path(root).resolve()
        return cls(
            root=root_path,
            vite_config=root_path / DEFAULT_VITE_CONFIG,
            routes_file=root_path / DEFAULT_ROUTES_FILE,
            schemas_file=root_path / DEFAULT_SCHEMAS_FILE,
            db_schema_file=root_path / DEFAULT_DB_SCHEMA_FILE,
            user_shard_file=root_path / DEFAULT_USER_SHARD_FILE,
            client_dir=root_path / DEFAULT_CLIENT_DIR,
            server_dir=root_path / DEFAULT_SERVER_DIR,
            env_example=root_path / DEFAULT_ENV_EXAMPLE,
        )

    def resolve(self, path: "os.PathLike[str] | str") -> Path:
        """Resolve a path relative to the project root."""
        p = Path(path)
        return p if p.is_absolute() else self.root / p

    def relative(self, path: Path) -> str:
        """Path relative to the root, for messages and diffs."""
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()

    def page_dir(self, name: str) -> Path:
        return self.client_dir / name

    def with_overrides(
        self,
        routes_file: Optional[str] = None,
        schemas_file: Optional[str] = None,
        user_shard_file: Optional[str] = None,
        vite_config: Optional[str] = None,
        db_schema_file: Optional[str] = None,
    ) -> "ProjectConfig":
        """Return a copy with any given paths replaced (relative to root)."""
        changes = {}
        if routes_file:
            changes["routes_file"] = self.resolve(routes_file)
        if schemas_file:
            changes["schemas_file"] = self.resolve(schemas_file)
        if user_shard_file:
            changes["user_shard_file"] = self.resolve(user_shard_file)
        if vite_config:
            changes["vite_config"] = self.resolve(vite_config)
        if db_schema_file:
            changes["db_schema_file"] = self.resolve(db_schema_file)
        return replace(self, **changes) if changes else self


def get_project_config(root: Optional[str] = None) -> ProjectConfig:
    """Load project configuration from environment."""
    root = root or os.getenv("DOLPHIN_PROJECT_ROOT") or os.getcwd()
    config = ProjectConfig.for_root(root)
    return config.with_overrides(
        routes_file=os.getenv("DOLPHIN_ROUTES_FILE"),
        schemas_file=os.getenv("DOLPHIN_SCHEMAS_FILE"),
        user_shard_file=os.getenv("DOLPHIN_USER_SHARD_FILE"),
        vite_config=os.getenv("DOLPHIN_VITE_CONFIG"),
        db_schema_file=os.getenv("DOLPHIN_DB_SCHEMA_FILE"),
    )
