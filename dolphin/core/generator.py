"""
Generation runs.

One run validates its input, renders templates, writes the new files and
then patches collaborator files, in that order. Validation and collision
checks happen before anything is written. There is no rollback: an I/O
error mid-run leaves already-written files in place.
"""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dolphin.core import feature_templates as features
from dolphin.core import page_templates as pages
from dolphin.core.config import ProjectConfig
from dolphin.core.emitter import (
    GeneratedFile,
    emit_files,
    ensure_page_absent,
    generate_unified_diff,
)
from dolphin.core.errors import PatchWarning, ValidationError
from dolphin.core.naming import Identifier, validate_identifier
from dolphin.core.patcher import (
    ImportSpec,
    PatchResult,
    patch_db_schema,
    patch_env_example,
    patch_route_file,
    patch_schema_file,
    patch_user_shard,
    patch_vite_config,
)

logger = logging.getLogger(__name__)

PAGE_TYPES = ("static", "dashboard", "feed")

TS_SUFFIXES = {".ts", ".tsx", ".js", ".jsx", ".mts"}


@dataclass
class GenerationResult:
    """Everything one run wrote, patched, or would have."""
    name: str
    kind: str
    files: list[GeneratedFile] = field(default_factory=list)
    patches: list[PatchResult] = field(default_factory=list)
    next_steps: list[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def warnings(self) -> list[PatchWarning]:
        return [w for p in self.patches for w in p.warnings]

    @property
    def manual_steps(self) -> list[str]:
        return [s for p in self.patches for s in p.manual_steps]

    def diff(self) -> str:
        parts = [generate_unified_diff(f.path, None, f.content) for f in self.files]
        parts.extend(p.diff for p in self.patches)
        return "".join(part for part in parts if part)


def module_specifier(from_dir: Path, target: Path) -> str:
    """Relative import specifier from a directory to a source file or folder."""
    if target.suffix in TS_SUFFIXES:
        target = target.with_suffix("")
    rel = os.path.relpath(target, from_dir).replace(os.sep, "/")
    return rel if rel.startswith(".") else f"./{rel}"


def _emit(config: ProjectConfig, files: list[GeneratedFile], dry_run: bool) -> None:
    if dry_run:
        logger.info(f"files_planned count={len(files)}")
        return
    emit_files(config, files)


# =============================================================================
# Pages
# =============================================================================

def check_page(name: str, page_type: str, config: ProjectConfig) -> tuple[Identifier, Path]:
    """Validate a page request before anything is written; returns (identifier, page dir)."""
    if page_type not in PAGE_TYPES:
        raise ValidationError(
            f"Unknown page type: {page_type}. Supported: {', '.join(PAGE_TYPES)}"
        )
    ident = validate_identifier(name)
    return ident, ensure_page_absent(config, ident.raw)


def generate_page(
    name: str,
    page_type: str,
    config: ProjectConfig,
    dry_run: bool = False,
) -> GenerationResult:
    """
    Generate a client page and wire it into the project.

    Raises:
        ValidationError: bad name or page type (nothing written)
        CollisionError: the page directory exists (nothing written)
    """
    ident, page_dir = check_page(name, page_type, config)

    logger.info(
        f"page_generation_start page={ident.raw} type={page_type} dry_run={dry_run}",
        extra={"page": ident.raw, "step": "start"},
    )

    schemas_module = module_specifier(page_dir, config.schemas_file)
    if page_type == "static":
        rendered = pages.render_static_page(ident)
    elif page_type == "dashboard":
        rendered = pages.render_dashboard_page(ident, schemas_module)
    else:
        rendered = pages.render_feed_page(ident, schemas_module)

    rel_dir = config.relative(page_dir)
    result = GenerationResult(
        name=ident.raw,
        kind=f"page:{page_type}",
        files=[GeneratedFile(path=f"{rel_dir}/{fname}", content=content) for fname, content in rendered.items()],
        dry_run=dry_run,
    )
    _emit(config, result.files, dry_run)

    write = not dry_run
    result.patches.append(patch_vite_config(config, ident.raw, write=write))
    if page_type == "dashboard":
        result.patches.extend(_wire_dashboard(ident, config, write))
    elif page_type == "feed":
        result.patches.extend(_wire_feed(ident, config, write))

    result.next_steps = _page_next_steps(ident, page_type)
    logger.info(
        f"page_generation_done page={ident.raw} files={len(result.files)} "
        f"warnings={len(result.warnings)}",
        extra={"page": ident.raw, "step": "done"},
    )
    return result


def _route_imports(config: ProjectConfig) -> ImportSpec:
    routes_dir = config.routes_file.parent
    return ImportSpec(
        module_specifier(routes_dir, config.server_dir / "middleware" / "auth.ts"),
        ("authMiddleware",),
    )


def _wire_dashboard(ident: Identifier, config: ProjectConfig, write: bool) -> list[PatchResult]:
    return [
        patch_route_file(
            config,
            marker=pages.dashboard_route_marker(ident),
            fragment=pages.dashboard_route(ident),
            imports=(_route_imports(config),),
            write=write,
        ),
        patch_schema_file(
            config,
            marker=pages.dashboard_schema_marker(ident),
            fragment=pages.dashboard_schema(ident),
            write=write,
        ),
    ]


def _wire_feed(ident: Identifier, config: ProjectConfig, write: bool) -> list[PatchResult]:
    routes_dir = config.routes_file.parent
    shard_dir = config.user_shard_file.parent
    return [
        patch_schema_file(
            config,
            marker=pages.feed_schema_marker(ident),
            fragment=pages.feed_schema(ident),
            write=write,
        ),
        patch_db_schema(
            config,
            marker=pages.feed_table_marker(ident),
            fragment=pages.feed_table(ident),
            write=write,
        ),
        patch_user_shard(
            config,
            marker=pages.feed_shard_marker(ident),
            fragment=pages.feed_shard_methods(ident),
            imports=(
                ImportSpec("drizzle-orm", ("desc",)),
                ImportSpec(module_specifier(shard_dir, config.db_schema_file), (f"{ident.camel}Items",)),
                ImportSpec(module_specifier(shard_dir, config.schemas_file), (f"type {ident.pascal}ItemInput",)),
            ),
            class_name=config.user_shard_file.stem,
            write=write,
        ),
        patch_route_file(
            config,
            marker=pages.feed_routes_marker(ident),
            fragment=pages.feed_routes(ident),
            imports=(
                _route_imports(config),
                ImportSpec(module_specifier(routes_dir, shard_dir), ("getUserShard",)),
                ImportSpec(module_specifier(routes_dir, config.schemas_file), (f"{ident.camel}ItemInputSchema",)),
            ),
            write=write,
        ),
    ]


def _page_next_steps(ident: Identifier, page_type: str) -> list[str]:
    steps = [
        f"Navigate to http://localhost:3000/{ident.raw}/",
        "Customize the page content",
    ]
    if page_type == "dashboard":
        steps.append(
            "Add to clientApi (src/client/clientApi/clientApi.ts):\n"
            f"async load{ident.pascal}() {{\n"
            f'  const response = await fetch("/api/load/{ident.raw}", {{ credentials: "include" }});\n'
            f'  if (!response.ok) throw new Error("Failed to load {ident.raw}");\n'
            "  return response.json();\n"
            "},"
        )
        steps.append("Fill in the load endpoint and add event handlers as needed")
    elif page_type == "feed":
        steps.append("Run migrations to create the new table")
    return steps


# =============================================================================
# Features
# =============================================================================

def generate_pricing(config: ProjectConfig, provider: str = "stripe", dry_run: bool = False) -> GenerationResult:
    """Billing tables, a webhook stub mounted on the server, pricing helpers."""
    provider = provider.lower()
    if provider not in features.PRICING_PROVIDERS:
        raise ValidationError(
            f"Unknown payment provider: {provider}. "
            f"Supported: {', '.join(sorted(features.PRICING_PROVIDERS))}"
        )

    webhook_path = config.server_dir / "webhooks" / f"{provider}.ts"
    pricing_path = config.server_dir / "pricing" / "index.ts"
    result = GenerationResult(
        name=provider,
        kind="pricing",
        files=[
            GeneratedFile(
                path=config.relative(webhook_path),
                content=features.webhook_handler(
                    provider, module_specifier(webhook_path.parent, config.db_schema_file)
                ),
            ),
            GeneratedFile(path=config.relative(pricing_path), content=features.pricing_abstractions()),
        ],
        dry_run=dry_run,
    )
    _emit(config, result.files, dry_run)

    write = not dry_run
    router = features.webhook_router_name(provider)
    mount = features.mount_route(router)
    result.patches = [
        patch_db_schema(config, features.BILLING_TABLES_MARKER, features.billing_tables(provider), write=write),
        patch_route_file(
            config,
            marker=mount.strip(),
            fragment=mount,
            imports=(ImportSpec(module_specifier(config.routes_file.parent, webhook_path), (router,)),),
            write=write,
        ),
        patch_env_example(config, features.pricing_env_marker(provider), features.pricing_env(provider), write=write),
    ]
    result.next_steps = [
        "Run migrations to create the new tables",
        f"Set up your {provider} webhook endpoint: /api/webhooks/{provider}",
        "Configure environment variables in .env",
        'Test with: check(userId, "api_calls") and track(userId, "api_calls")',
    ]
    logger.info(f"pricing_generation_done provider={provider}", extra={"step": "done"})
    return result


def generate_ai_assistant(
    config: ProjectConfig,
    provider: str = "openai",
    model: str = features.DEFAULT_AI_MODEL,
    dry_run: bool = False,
) -> GenerationResult:
    """AI conversation tables, API router mounted on the server, client hook."""
    provider = provider.lower()
    if provider not in features.AI_PROVIDERS:
        raise ValidationError(
            f"Unknown AI provider: {provider}. "
            f"Supported: {', '.join(sorted(features.AI_PROVIDERS))}"
        )

    router_path = config.server_dir / "api" / "ai.ts"
    hook_path = config.client_dir / "utils" / "ai-assistant.ts"
    result = GenerationResult(
        name=provider,
        kind="ai-assistant",
        files=[
            GeneratedFile(
                path=config.relative(router_path),
                content=features.ai_router(
                    provider, model, module_specifier(router_path.parent, config.db_schema_file)
                ),
            ),
            GeneratedFile(path=config.relative(hook_path), content=features.ai_client_hook()),
        ],
        dry_run=dry_run,
    )
    _emit(config, result.files, dry_run)

    write = not dry_run
    mount = features.mount_route(features.AI_ROUTER_NAME)
    result.patches = [
        patch_db_schema(config, features.AI_TABLES_MARKER, features.ai_tables(), write=write),
        patch_route_file(
            config,
            marker=mount.strip(),
            fragment=mount,
            imports=(
                ImportSpec(module_specifier(config.routes_file.parent, router_path), (features.AI_ROUTER_NAME,)),
            ),
            write=write,
        ),
        patch_env_example(config, features.AI_ENV_MARKER, features.ai_env(provider, model), write=write),
    ]
    result.next_steps = [
        "Run migrations to create the AI tables",
        f"Set your {provider.upper()}_API_KEY in .env",
        "Use the useAIConversation hook in your components",
    ]
    logger.info(f"ai_assistant_generation_done provider={provider}", extra={"step": "done"})
    return result
