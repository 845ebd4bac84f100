import re
from re import Pattern

_GLOB_CACHE: dict[str, Pattern[str]] = {}


def compile_glob(pattern: str) -> Pattern[str]:
    """Convert a glob pattern into a compiled regex.

    `*` matches any run of characters, `?` matches a single character.
    Pipeline names often contain slashes (e.g. "buildkite/app-ci"), so unlike
    path globs `*` is allowed to cross them.

    Args:
        pattern: The glob pattern string.

    Returns:
        A compiled regex pattern object.
    """
    cached = _GLOB_CACHE.get(pattern)
    if cached:
        return cached

    regex_parts: list[str] = []
    for char in pattern:
        if char == "*":
            regex_parts.append(".*")
        elif char == "?":
            regex_parts.append(".")
        else:
            regex_parts.append(re.escape(char))

    compiled = re.compile("^" + "".join(regex_parts) + "$")
    _GLOB_CACHE[pattern] = compiled
    return compiled


def matches_glob(name: str, pattern: str) -> bool:
    """Check whether a name matches a glob pattern."""
    return compile_glob(pattern).match(name) is not None


def first_line(text: str | None) -> str:
    """Return the first line of a (commit) message."""
    if not text:
        return ""
    return text.split("\n", 1)[0].rstrip("\r")


def shorten(text: str | None, limit: int = 40) -> str:
    """Truncate text for log previews, escaping newlines."""
    if text is None:
        return "none"
    escaped = text.replace("\n", "\\n")
    if len(escaped) <= limit:
        return escaped
    return escaped[: limit - 3] + "..."
