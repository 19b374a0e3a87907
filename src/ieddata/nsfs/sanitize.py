"""Database file name sanitization."""

import re

_NOT_ALPHANUMS_AND_MORE = re.compile(r"[^a-zA-Z0-9\-_.]+")
_DOT_DOTS = re.compile(r"(\.\.)+")

PLACEHOLDER = "_"


def sanitize(basename: str) -> str:
    """Sanitize a database base name so it cannot trigger path traversal or
    pass SQLite URI options.

    Only ASCII alphanumerics, dots "." (but not ".."), dashes "-", and
    underscores "_" are kept. Runs of any other characters are replaced by a
    single "_", as is any run of "..". Idempotent on already-safe names.
    """
    safe = _NOT_ALPHANUMS_AND_MORE.sub(PLACEHOLDER, basename)
    # "..." collapses to "_." in one pass, so keep going until nothing matches
    while _DOT_DOTS.search(safe):
        safe = _DOT_DOTS.sub(PLACEHOLDER, safe)
    return safe
