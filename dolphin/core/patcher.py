"""
Idempotent source patcher.

Splices generated fragments into existing collaborator files:
- vite config: one entry per page in the ``input`` mapping
- server route file: imports, then route blocks before the catch-all
- type-schema / database schema: declarations appended (file created if absent)
- user shard class: imports, then methods before the class closing brace
- .env.example: variable blocks appended

Every patch is guarded by a marker derived from the identifier: if the
marker is already in the file, the file is left byte-for-byte unchanged.
Anchors that cannot be found never corrupt a file; the condition is
recorded as a warning on the PatchResult with a manual follow-up step.
"""
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from dolphin.core.anchors import (
    AfterFirstImportAnchor,
    AnchorStrategy,
    CatchAllRouteAnchor,
    ClassBodyEndAnchor,
    DefaultExportAnchor,
    EndOfFileAnchor,
    ViteInputAnchor,
    locate,
)
from dolphin.core.config import ProjectConfig
from dolphin.core.emitter import generate_unified_diff, read_file, write_file
from dolphin.core.errors import (
    MissingCollaboratorWarning,
    PatchAnchorNotFoundWarning,
    PatchWarning,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

STATUS_CREATED = "created"
STATUS_PATCHED = "patched"
STATUS_UNCHANGED = "unchanged"
STATUS_SKIPPED = "skipped"

SCHEMA_PREAMBLE = 'import { z } from "zod";\n'

DB_SCHEMA_PREAMBLE = '''import { sqliteTable, text, integer, real, blob } from "drizzle-orm/sqlite-core";
import { sql } from "drizzle-orm";
'''

ROUTE_ANCHORS = (CatchAllRouteAnchor(), DefaultExportAnchor())


@dataclass(frozen=True)
class ImportSpec:
    """Named imports required from one module."""
    module: str
    names: tuple[str, ...]


@dataclass
class InsertionTarget:
    """Where a fragment goes and how to tell it is already there."""
    path: Path
    marker: str
    fragment: str
    anchors: Sequence[AnchorStrategy]
    imports: Sequence[ImportSpec] = ()
    fallback_to_eof: bool = False
    preamble: Optional[str] = None  # create the file with this text when absent
    manual_step: str = ""


@dataclass
class PatchResult:
    """Outcome of one patch operation."""
    path: str
    status: str
    original: Optional[str] = None
    content: Optional[str] = None
    warnings: list[PatchWarning] = field(default_factory=list)
    manual_steps: list[str] = field(default_factory=list)
    anchor: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.status in (STATUS_CREATED, STATUS_PATCHED)

    @property
    def diff(self) -> str:
        if not self.changed or self.content is None:
            return ""
        original = None if self.status == STATUS_CREATED else self.original
        return generate_unified_diff(self.path, original, self.content)


# =============================================================================
# Text operations
# =============================================================================

def _named_import_pattern(module: str) -> re.Pattern:
    return re.compile(
        r"^import\s+(?:[\w$]+\s*,\s*)?\{(?P<names>[^}]*)\}\s*from\s*"
        rf"(?P<q>['\"]){re.escape(module)}(?P=q)[ \t]*;?",
        re.MULTILINE,
    )


def _split_names(names: str) -> list[str]:
    return [n.strip() for n in names.split(",") if n.strip()]


def _binding(entry: str) -> str:
    """Local name bound by an import entry (``a as b`` -> ``b``)."""
    entry = re.sub(r"^type\s+", "", entry)
    return entry.split(" as ")[-1].strip()


def merge_named_imports(text: str, spec: ImportSpec) -> tuple[str, bool]:
    """
    Extend an existing ``import { ... } from "<module>"`` with missing names.

    Returns (text, found). When no such statement exists the text is
    returned unchanged with found=False.
    """
    m = _named_import_pattern(spec.module).search(text)
    if not m:
        return text, False

    inner = m.group("names")
    existing = _split_names(inner)
    bound = {_binding(e) for e in existing}
    missing = [n for n in spec.names if _binding(n) not in bound]
    if not missing:
        return text, True

    merged = existing + missing
    if "\n" in inner:
        indent_match = re.search(r"\n([ \t]+)\S", inner)
        indent = indent_match.group(1) if indent_match else "  "
        new_inner = "\n" + "".join(f"{indent}{n},\n" for n in merged)
    else:
        new_inner = " " + ", ".join(merged) + " "

    return text[:m.start("names")] + new_inner + text[m.end("names"):], True


def ensure_imports(text: str, specs: Sequence[ImportSpec]) -> str:
    """Merge or insert every import spec; new statements go after the first import."""
    new_statements = []
    for spec in specs:
        text, found = merge_named_imports(text, spec)
        if not found:
            new_statements.append(f'import {{ {", ".join(spec.names)} }} from "{spec.module}";\n')

    if not new_statements:
        return text

    block = "".join(new_statements)
    offset = AfterFirstImportAnchor().find(text)
    if offset is None:
        return block + ("\n" + text if text else "")
    if offset == len(text) and text and not text.endswith("\n"):
        block = "\n" + block
    return text[:offset] + block + text[offset:]


def splice(text: str, offset: int, fragment: str) -> str:
    """Insert fragment at offset as whole lines separated by blank lines."""
    before, after = text[:offset], text[offset:]
    block = fragment.strip("\n") + "\n"

    if before and not before.endswith("\n"):
        before += "\n"
    if before.strip() and not before.endswith("\n\n") and not before.rstrip().endswith("{"):
        before += "\n"
    if after and not after.startswith("\n") and not after.lstrip(" \t").startswith("}"):
        block += "\n"
    return before + block + after


# =============================================================================
# Generic insertion
# =============================================================================

def apply_insertion(target: InsertionTarget, config: ProjectConfig, write: bool = True) -> PatchResult:
    """
    Apply one insertion target.

    1. Missing file: create from preamble, or skip with a warning
    2. Marker present: unchanged
    3. Merge imports
    4. Splice the fragment before the first anchor found
    5. Write the whole file back
    """
    rel = config.relative(target.path)
    original = read_file(target.path)
    status = STATUS_PATCHED

    if original is None:
        if target.preamble is None:
            warning = MissingCollaboratorWarning(f"{rel} not found", path=rel)
            logger.warning(f"patch_skipped_missing path={rel}", extra={"path": rel, "status": STATUS_SKIPPED})
            return PatchResult(
                path=rel,
                status=STATUS_SKIPPED,
                warnings=[warning],
                manual_steps=[target.manual_step] if target.manual_step else [],
            )
        text = target.preamble
        status = STATUS_CREATED
    else:
        text = original

    if target.marker in text:
        logger.info(f"patch_unchanged path={rel} marker={target.marker}", extra={"path": rel, "status": STATUS_UNCHANGED})
        return PatchResult(path=rel, status=STATUS_UNCHANGED, original=original, content=original)

    warnings: list[PatchWarning] = []
    strategy, offset = locate(text, target.anchors)
    if offset is None:
        if not target.fallback_to_eof:
            warning = PatchAnchorNotFoundWarning(
                f"No insertion point found in {rel}; file left unchanged", path=rel
            )
            logger.warning(f"patch_anchor_not_found path={rel}", extra={"path": rel, "status": STATUS_SKIPPED})
            return PatchResult(
                path=rel,
                status=STATUS_SKIPPED,
                original=original,
                content=original,
                warnings=[warning],
                manual_steps=[target.manual_step] if target.manual_step else [],
            )
        warnings.append(PatchAnchorNotFoundWarning(
            f"No insertion point found in {rel}; appended at end of file", path=rel
        ))
        logger.warning(f"patch_anchor_fallback_eof path={rel}", extra={"path": rel})
        strategy = EndOfFileAnchor()

    # Anchor offsets are located again after imports shift the text
    text = ensure_imports(text, target.imports)
    offset = strategy.find(text)
    text = splice(text, offset, target.fragment)

    if write:
        write_file(target.path, text)
    logger.info(
        f"patch_applied path={rel} anchor={strategy.name} marker={target.marker}",
        extra={"path": rel, "status": status},
    )
    return PatchResult(
        path=rel,
        status=status,
        original=original,
        content=text,
        warnings=warnings,
        anchor=strategy.name,
    )


# =============================================================================
# Collaborator patchers
# =============================================================================

def _vite_entry_present(inner: str, name: str) -> bool:
    return re.search(rf"(?:^|[\s,{{])([\"']?){re.escape(name)}\1\s*:", inner) is not None


def patch_vite_config(config: ProjectConfig, name: str, write: bool = True) -> PatchResult:
    """Add ``"<name>": resolve(__dirname, "src/client/<name>/index.html")`` to the input mapping."""
    rel = config.relative(config.vite_config)
    html_path = f"{config.relative(config.page_dir(name))}/index.html"
    entry = f'"{name}": resolve(__dirname, "{html_path}"),'
    manual = f"Add {entry} to build.rollupOptions.input in {rel}"

    original = read_file(config.vite_config)
    if original is None:
        logger.warning(f"patch_skipped_missing path={rel}", extra={"path": rel, "status": STATUS_SKIPPED})
        return PatchResult(
            path=rel,
            status=STATUS_SKIPPED,
            warnings=[MissingCollaboratorWarning(f"{rel} not found", path=rel)],
            manual_steps=[manual],
        )

    anchor = ViteInputAnchor()
    m = anchor.match(original)
    if not m:
        logger.warning(f"patch_anchor_not_found path={rel}", extra={"path": rel, "status": STATUS_SKIPPED})
        return PatchResult(
            path=rel,
            status=STATUS_SKIPPED,
            original=original,
            content=original,
            warnings=[PatchAnchorNotFoundWarning(
                f"Could not find rollupOptions.input in {rel}", path=rel
            )],
            manual_steps=[manual],
        )

    inner = m.group(1)
    if _vite_entry_present(inner, name):
        logger.info(f"patch_unchanged path={rel} marker={name}", extra={"path": rel, "status": STATUS_UNCHANGED})
        return PatchResult(path=rel, status=STATUS_UNCHANGED, original=original, content=original)

    closing_indent = ""
    if "\n" in inner:
        tail = inner[inner.rfind("\n") + 1:]
        if not tail.strip():
            closing_indent = tail
    entry_lines = [line for line in inner.splitlines() if line.strip()]
    if entry_lines:
        entry_indent = entry_lines[-1][:len(entry_lines[-1]) - len(entry_lines[-1].lstrip())]
    else:
        entry_indent = closing_indent + "  "

    body = inner.rstrip()
    if body.strip() and not body.endswith(","):
        body += ","
    if not body.strip():
        body = ""
    new_inner = f"{body}\n{entry_indent}{entry}\n{closing_indent}"

    text = original[:m.start(1)] + new_inner + original[m.end(1):]
    if write:
        write_file(config.vite_config, text)
    logger.info(f"patch_applied path={rel} anchor={anchor.name} marker={name}", extra={"path": rel})
    return PatchResult(
        path=rel,
        status=STATUS_PATCHED,
        original=original,
        content=text,
        anchor=anchor.name,
    )


def patch_route_file(
    config: ProjectConfig,
    marker: str,
    fragment: str,
    imports: Sequence[ImportSpec] = (),
    write: bool = True,
) -> PatchResult:
    """Insert route registrations before the catch-all route or default export."""
    rel = config.relative(config.routes_file)
    return apply_insertion(
        InsertionTarget(
            path=config.routes_file,
            marker=marker,
            fragment=fragment,
            anchors=ROUTE_ANCHORS,
            imports=imports,
            fallback_to_eof=True,
            manual_step=f"Register these routes in {rel}:\n{fragment.strip()}",
        ),
        config,
        write=write,
    )


def patch_schema_file(
    config: ProjectConfig,
    marker: str,
    fragment: str,
    write: bool = True,
) -> PatchResult:
    """Append type/validator declarations; create the file when absent."""
    return apply_insertion(
        InsertionTarget(
            path=config.schemas_file,
            marker=marker,
            fragment=fragment,
            anchors=(EndOfFileAnchor(),),
            preamble=SCHEMA_PREAMBLE,
        ),
        config,
        write=write,
    )


def patch_db_schema(
    config: ProjectConfig,
    marker: str,
    fragment: str,
    write: bool = True,
) -> PatchResult:
    """Append drizzle table definitions to the sharded schema."""
    return apply_insertion(
        InsertionTarget(
            path=config.db_schema_file,
            marker=marker,
            fragment=fragment,
            anchors=(EndOfFileAnchor(),),
            preamble=DB_SCHEMA_PREAMBLE,
        ),
        config,
        write=write,
    )


def patch_user_shard(
    config: ProjectConfig,
    marker: str,
    fragment: str,
    imports: Sequence[ImportSpec] = (),
    class_name: Optional[str] = None,
    write: bool = True,
) -> PatchResult:
    """Insert methods before the closing brace of the user shard class."""
    rel = config.relative(config.user_shard_file)
    return apply_insertion(
        InsertionTarget(
            path=config.user_shard_file,
            marker=marker,
            fragment=fragment,
            anchors=(ClassBodyEndAnchor(class_name),),
            imports=imports,
            manual_step=f"Add these methods to the shard class in {rel}:\n{fragment.strip()}",
        ),
        config,
        write=write,
    )


def patch_env_example(
    config: ProjectConfig,
    marker: str,
    fragment: str,
    write: bool = True,
) -> PatchResult:
    """Append an environment variable block to .env.example."""
    return apply_insertion(
        InsertionTarget(
            path=config.env_example,
            marker=marker,
            fragment=fragment,
            anchors=(EndOfFileAnchor(),),
            preamble="",
        ),
        config,
        write=write,
    )
