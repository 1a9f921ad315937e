"""Path parameter extraction and decoding."""

import re
from urllib.parse import unquote

from waypoint.routing.pattern import ParamKey

# "%" not starting a two-digit hex escape
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def safe_unquote(value: str) -> str:
    """Percent-decode *value*.

    Returns it unchanged when any escape is malformed or the decoded bytes
    are not valid UTF-8; a capture is never partly decoded.
    """
    if _MALFORMED_ESCAPE.search(value):
        return value
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


def extract_params(
    keys: tuple[ParamKey, ...],
    captures: tuple[str | None, ...],
    params: dict[str, str],
) -> dict[str, str]:
    """Merge decoded captures into *params* and return it.

    Keys whose optional group did not participate are left absent. A name
    already in *params* is overwritten but keeps its original position, so
    iteration order stays the order names first appeared in the URL.
    """
    for key, capture in zip(keys, captures, strict=False):
        if capture is not None:
            params[key.name] = safe_unquote(capture)
    return params
