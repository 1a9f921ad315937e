"""Path pattern compilation.

Turns a route path string into an anchored regular expression plus the
ordered list of parameter descriptors its capture groups map to.

Supported syntax::

    "/users"                 static
    "/users/:id"             named segment          -> id
    "/users/:id?"            optional segment       -> id (may be absent)
    "/files/:path*"          zero or more segments  -> path (may be absent)
    "/files/:path+"          one or more segments   -> path
    "/users/:id(\\d+)"       named segment with a custom pattern
    "/assets/(\\w+)"         anonymous group        -> "0", "1", ...
    "/api(.*)"               trailing catch-all: "/api", "/api/", "/api/..."
    "(.*)"                   matches every path

Matching is case-insensitive and tolerates one trailing slash. Capture
groups map 1:1, in declaration order, to ``PathPattern.keys``. A catch-all
tail never captures.

A precompiled ``re.Pattern`` is accepted as-is: its groups become the
keys (named groups by name, the others numbered from zero).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

CATCH_ALL = "(.*)"

# escaped char | optional prefix + (:name + optional (pattern) | anonymous (pattern)) + modifier
_TOKEN = re.compile(
    r"(\\.)"
    r"|([/.])?(?:(?::(\w+)(?:\(((?:\\.|[^\\()])+)\))?|\(((?:\\.|[^\\()])+)\))([+*?])?)"
)

# ":name" right before a trailing "(.*)" makes it a custom parameter pattern
_NAMED_TAIL = re.compile(r":\w+\Z")


@dataclass(frozen=True, slots=True)
class ParamKey:
    """A parameter captured by a path pattern."""

    name: str
    optional: bool = False


@dataclass(frozen=True, slots=True)
class PathPattern:
    """A compiled path pattern.

    ``source`` is the sanitized pattern string, or the ``re.Pattern`` it
    was built from. ``keys`` is empty for static patterns (including the
    catch-all).
    """

    source: str | re.Pattern[str]
    regex: re.Pattern[str]
    keys: tuple[ParamKey, ...] = ()

    @property
    def is_static(self) -> bool:
        return not self.keys

    def match(self, path: str) -> tuple[str | None, ...] | None:
        """Return the ordered captures if *path* matches, else ``None``.

        A capture is ``None`` when its optional group did not participate.
        """
        m = self.regex.fullmatch(path)
        if m is None:
            return None
        return m.groups()

    def with_prefix(self, prefix: str) -> PathPattern:
        """Compile a new pattern equal to *prefix* followed by this one."""
        if isinstance(self.source, str):
            return compile_path(sanitize_path(prefix + self.source))
        head = compile_path(sanitize_path(prefix))
        head_src = head.regex.pattern.removesuffix("/?")
        if head_src == "/":
            head_src = ""
        # the prefix matches case-insensitively like every string route
        if head_src:
            head_src = f"(?i:{head_src})"
        regex = re.compile(head_src + self.source.pattern, self.source.flags)
        return PathPattern(source=regex, regex=regex, keys=head.keys + _regex_keys(self.source))


def sanitize_path(path: str | None) -> str:
    """Normalize slashes in a route path.

    Empty becomes ``/``; leading, trailing and duplicate slashes collapse
    to a single leading ``/``. A trailing ``(.*)`` is kept verbatim after
    the sanitized head, so ``"(.*)"`` itself passes through unchanged.
    """
    if not path:
        return "/"
    head = _catch_all_head(path)
    if head is not None:
        return (_collapse(head) if head.strip("/") else "") + CATCH_ALL
    return _collapse(path)


def _collapse(path: str) -> str:
    return "/" + "/".join(part for part in path.split("/") if part)


def _catch_all_head(path: str) -> str | None:
    """Return the part before a trailing catch-all, or None if there is none.

    ``":name(.*)"`` is a named parameter with a custom pattern, not a catch-all.
    """
    if not path.endswith(CATCH_ALL):
        return None
    head = path[: -len(CATCH_ALL)]
    if _NAMED_TAIL.search(head):
        return None
    return head


def compile_path(path: str | re.Pattern[str]) -> PathPattern:
    """Compile a (sanitized) path pattern into a ``PathPattern``."""
    if isinstance(path, re.Pattern):
        return PathPattern(source=path, regex=path, keys=_regex_keys(path))

    body, tail = path, ""
    head = _catch_all_head(path)
    if head is not None:
        body = head
        tail = r"(?:/.*)?" if body else r".*"

    keys: list[ParamKey] = []
    parts: list[str] = []
    position = 0
    anonymous = 0

    for token in _TOKEN.finditer(body):
        parts.append(re.escape(body[position : token.start()]))
        position = token.end()
        escaped, prefix, name, capture, group, modifier = token.groups()

        if escaped:
            parts.append(re.escape(escaped[1]))
            continue

        if name is None:
            name = str(anonymous)
            anonymous += 1

        delimiter = prefix or "/"
        pattern = capture or group or f"[^{re.escape(delimiter)}]+?"
        pattern = f"(?:{pattern})"
        optional = modifier in ("?", "*")
        if modifier in ("+", "*"):
            pattern = f"{pattern}(?:{re.escape(delimiter)}{pattern})*"

        esc_prefix = re.escape(prefix) if prefix else ""
        if optional:
            parts.append(f"(?:{esc_prefix}({pattern}))?" if prefix else f"({pattern})?")
        else:
            parts.append(f"{esc_prefix}({pattern})")
        keys.append(ParamKey(name=name, optional=optional))

    parts.append(re.escape(body[position:]))
    source = "".join(parts)
    if tail:
        source += tail
    elif not source.endswith("/"):
        source += "/?"

    return PathPattern(
        source=path,
        regex=re.compile(source, re.IGNORECASE),
        keys=tuple(keys),
    )


def _regex_keys(regex: re.Pattern[str]) -> tuple[ParamKey, ...]:
    names = {index: name for name, index in regex.groupindex.items()}
    keys: list[ParamKey] = []
    anonymous = 0
    for index in range(1, regex.groups + 1):
        name = names.get(index)
        if name is None:
            name = str(anonymous)
            anonymous += 1
        keys.append(ParamKey(name=name, optional=True))
    return tuple(keys)
