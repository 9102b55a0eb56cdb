"""
Path sanitization and sandbox containment.

Paths that come from users or from note content go through sanitize()
before they reach the remote store, and writes are only allowed for paths
that is_contained() places under the vault root.
"""

import re

MAX_PATH_LENGTH = 200
MAX_GENERATED_FILENAME_LENGTH = 100

ILLEGAL_CHARACTERS = re.compile(r'[:*?"<>|]')
FILENAME_ILLEGAL_CHARACTERS = re.compile(r'[/\\:*?"<>|]')
SEPARATORS = re.compile(r'[/\\]+')
DASH_RUNS = re.compile(r'-+')


def _clean_segment(segment: str) -> str:
    # Only illegal characters change; names like "v1..2.md" or "a--b.md" are kept
    return ILLEGAL_CHARACTERS.sub("-", segment).strip()


def sanitize(raw_path: str) -> str:
    """
    Normalize a path for use against the remote store.

    Backslashes become separators, repeated separators collapse, "."
    segments drop and ".." segments are resolved without ever climbing
    above the root. Illegal characters become "-". The result is absolute
    and at most MAX_PATH_LENGTH characters long.

    >>> sanitize("../../../etc/passwd")
    '/etc/passwd'
    >>> sanitize("/vault//notes/../todo?.md")
    '/vault/todo-.md'
    """
    normalized = []
    for part in SEPARATORS.split(raw_path.strip()):
        part = part.strip()
        if part in ("", "."):
            continue
        if part == "..":
            if normalized:
                normalized.pop()
            continue
        cleaned = _clean_segment(part)
        if cleaned:
            normalized.append(cleaned)

    return ("/" + "/".join(normalized))[:MAX_PATH_LENGTH].rstrip("/") or "/"


def is_contained(candidate_path: str, sandbox_root: str) -> bool:
    """
    Case-insensitive check that a path lies inside the sandbox root.

    The candidate is sanitized first, so traversal sequences cannot escape.
    Containment respects segment boundaries: "/vault2" is not inside
    "/vault".
    """
    target = sanitize(candidate_path).lower()
    root = sanitize(sandbox_root).lower()

    if root == "/":
        return True
    return target == root or target.startswith(root + "/")


def sanitize_filename(name: str) -> str:
    """
    Make a single file name safe, with no separators at all.

    >>> sanitize_filename("../../../etc/passwd")
    'etc-passwd'
    """
    name = name.replace("..", "")
    name = FILENAME_ILLEGAL_CHARACTERS.sub("-", name)
    name = DASH_RUNS.sub("-", name)
    name = name.strip("-")
    return name.strip()[:MAX_PATH_LENGTH]


def generate_filename(title: str, body: str) -> str:
    """Pick a note file name from its title, else its first line, else "Untitled"."""
    title = title.strip()
    if title:
        return sanitize_filename(title)[:MAX_GENERATED_FILENAME_LENGTH]

    first_line = body.split("\n")[0].strip() if body else ""
    if first_line:
        return sanitize_filename(first_line)[:MAX_GENERATED_FILENAME_LENGTH]

    return "Untitled"


def get_parent_path(path: str) -> str:
    """Parent folder of a path; "" for top-level entries."""
    index = path.rstrip("/").rfind("/")
    if index <= 0:
        return ""
    return path[:index]


def remove_extension(filename: str) -> str:
    """Strip a trailing ".md" extension only."""
    if filename.endswith(".md"):
        return filename[:-3]
    return filename


def join_path(root: str, *parts: str) -> str:
    """Join path pieces with single separators."""
    pieces = [root.rstrip("/")] + [p.strip("/") for p in parts if p and p.strip("/")]
    joined = "/".join(pieces)
    if not joined.startswith("/"):
        joined = "/" + joined
    return joined
