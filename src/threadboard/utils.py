import re
from datetime import UTC, datetime

_WHITESPACE_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[^\w-]+")


def slugify(title: str) -> str:
    """Lower-case the title, turn whitespace into dashes and drop other symbols."""
    return _NON_WORD_RE.sub("", _WHITESPACE_RE.sub("-", title.strip().lower()))


def now() -> datetime:
    return datetime.now(UTC)
