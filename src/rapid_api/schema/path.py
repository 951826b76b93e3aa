"""Path template parsing.

Templates contain ``{name}`` or ``{name:regex}`` placeholders. Braces inside
the regex must be balanced, so ``{id:\\d{1,3}}`` is a single placeholder.
"""

import re
from dataclasses import dataclass

from rapid_api.errors import SchemaError

DEFAULT_VARIABLE_PATTERN = "[^/]+"


@dataclass(frozen=True)
class PathVariable:
    name: str
    pattern: str | None = None


def parse_template(path: str) -> list[str | PathVariable]:
    """Split a path template into literal chunks and PathVariables."""
    parts: list[str | PathVariable] = []
    literal: list[str] = []
    i = 0
    while i < len(path):
        if path[i] != "{":
            literal.append(path[i])
            i += 1
            continue
        end = _closing_brace(path, i)
        if literal:
            parts.append("".join(literal))
            literal = []
        name, _, pattern = path[i + 1:end].partition(":")
        if not name.isidentifier():
            raise SchemaError(f"invalid path variable {name!r} in {path!r}")
        parts.append(PathVariable(name, pattern or None))
        i = end + 1
    if literal:
        parts.append("".join(literal))
    return parts


def _closing_brace(path: str, start: int) -> int:
    depth = 0
    i = start
    while i < len(path):
        ch = path[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    raise SchemaError(f"unbalanced braces in path {path!r}")


def compile_path(path: str) -> re.Pattern:
    """Compile a template into an anchored pattern with one named group per variable."""
    pattern = []
    for part in parse_template(path):
        if isinstance(part, PathVariable):
            pattern.append(f"(?P<{part.name}>{part.pattern or DEFAULT_VARIABLE_PATTERN})")
        else:
            pattern.append(re.escape(part))
    try:
        return re.compile("^" + "".join(pattern) + "$")
    except re.error as e:
        raise SchemaError(f"invalid pattern in path {path!r}: {e}") from e


def simplified_path(path: str) -> str:
    """Drop regex constraints, keeping only ``{name}`` placeholders."""
    return "".join(
        f"{{{part.name}}}" if isinstance(part, PathVariable) else part
        for part in parse_template(path)
    )


def path_variables(path: str) -> list[str]:
    return [part.name for part in parse_template(path) if isinstance(part, PathVariable)]
