"""
Anchor strategies for source patching.

Each strategy answers one question: given the current text of a file,
where should new content be inserted? ``find`` returns a character offset
or None when the anchor is absent. Strategies hold no state between calls,
so anchors are always located fresh.

Tie-breaks when a pattern matches more than once:
- catch-all route: last match (the terminal fallback route)
- default export: last match
- class body end: the brace that closes the named class
- vite input mapping: first match
"""
import re
from typing import Optional, Protocol, Sequence


class AnchorStrategy(Protocol):
    """Locate an insertion point in file text."""
    name: str

    def find(self, text: str) -> Optional[int]:
        ...


def _line_start(text: str, offset: int) -> int:
    return text.rfind("\n", 0, offset) + 1


class RegexAnchor:
    """Insert before the line holding the first or last match of a pattern."""

    def __init__(self, name: str, pattern: str, last: bool = False, flags: int = re.MULTILINE):
        self.name = name
        self.pattern = re.compile(pattern, flags)
        self.last = last

    def find(self, text: str) -> Optional[int]:
        matches = list(self.pattern.finditer(text))
        if not matches:
            return None
        match = matches[-1] if self.last else matches[0]
        return _line_start(text, match.start())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class CatchAllRouteAnchor(RegexAnchor):
    """
    The last fallback route: ``app.get("*", ...)``, ``app.all("/*", ...)``,
    ``app.use("*", serveStatic(...))`` or ``app.notFound(...)``.

    Other ``use("*", ...)`` calls register middleware and are not anchors.
    """

    PATTERN = (
        r"^[ \t]*[\w$]+\.(?:"
        r"(?:get|all)\(\s*([\"'`])/?\*\1"
        r"|use\(\s*([\"'`])/?\*\2\s*,\s*serveStatic\("
        r"|notFound\()"
    )

    def __init__(self):
        super().__init__("catch_all_route", self.PATTERN, last=True)


class DefaultExportAnchor(RegexAnchor):
    """The file's last ``export default`` statement."""

    def __init__(self):
        super().__init__("default_export", r"^export\s+default\b", last=True)


class EndOfFileAnchor:
    """Always found: the end of the text."""
    name = "end_of_file"

    def find(self, text: str) -> Optional[int]:
        return len(text)

    def __repr__(self) -> str:
        return "EndOfFileAnchor()"


class ViteInputAnchor:
    """Closing brace of the ``input: { ... }`` mapping in a Vite config."""
    name = "vite_input"

    PATTERN = re.compile(r"input:\s*\{([^}]*)\}", re.DOTALL)

    def match(self, text: str) -> Optional[re.Match]:
        return self.PATTERN.search(text)

    def find(self, text: str) -> Optional[int]:
        m = self.match(text)
        return m.end(1) if m else None

    def __repr__(self) -> str:
        return "ViteInputAnchor()"


class ClassBodyEndAnchor:
    """
    Start of the line holding the closing brace of a class body.

    Braces are counted outside string literals and comments; this is a
    lexical scan, not a parse. With no class name the first class
    declaration in the file is used.
    """
    name = "class_body_end"

    def __init__(self, class_name: Optional[str] = None):
        self.class_name = class_name
        ident = re.escape(class_name) if class_name else r"[\w$]+"
        self.pattern = re.compile(
            rf"^[ \t]*(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+{ident}\b[^{{]*\{{",
            re.MULTILINE,
        )

    def find(self, text: str) -> Optional[int]:
        m = self.pattern.search(text)
        if not m:
            return None
        close = _matching_brace(text, m.end() - 1)
        if close is None:
            return None
        line_start = _line_start(text, close)
        if text[line_start:close].strip():
            return close
        return line_start

    def __repr__(self) -> str:
        return f"ClassBodyEndAnchor({self.class_name!r})"


class AfterFirstImportAnchor:
    """Just past the first import statement (its line ending included)."""
    name = "after_first_import"

    PATTERN = re.compile(
        r"^import\s+(?:[^;'\"`]*?\s+from\s+)?(['\"])[^'\"\n]+\1[ \t]*;?",
        re.MULTILINE,
    )

    def find(self, text: str) -> Optional[int]:
        m = self.PATTERN.search(text)
        if not m:
            return None
        end = m.end()
        if text.startswith("\n", end):
            end += 1
        return end

    def __repr__(self) -> str:
        return "AfterFirstImportAnchor()"


def locate(text: str, strategies: Sequence[AnchorStrategy]) -> tuple[Optional[AnchorStrategy], Optional[int]]:
    """First strategy in order that finds an anchor, and its offset."""
    for strategy in strategies:
        offset = strategy.find(text)
        if offset is not None:
            return strategy, offset
    return None, None


# =============================================================================
# Lexical brace matching
# =============================================================================

def _matching_brace(text: str, open_pos: int) -> Optional[int]:
    """Offset of the ``}`` matching the ``{`` at open_pos, skipping strings and comments."""
    depth = 0
    i = open_pos
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in "\"'`":
            i = _skip_string(text, i)
            continue
        if text.startswith("//", i):
            nl = text.find("\n", i)
            i = n if nl == -1 else nl
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return None


def _skip_string(text: str, start: int) -> int:
    quote = text[start]
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n" and quote != "`":
            return i
        i += 1
    return len(text)
