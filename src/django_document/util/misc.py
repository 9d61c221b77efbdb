import re
from typing import Any, Iterable

WHITESPACE_RE = re.compile(r"\s+")


def is_nonempty_str(txt: Any) -> bool:
    return isinstance(txt, str) and txt.strip() != ""


def normalize_handles(handles: Iterable[str]) -> list[str]:
    """Trim each handle, keeping the given order."""
    return [handle.strip() for handle in handles]


def dedupe_class_tokens(classes: str) -> str:
    """
    Collapse whitespace in a `class` attribute value and drop repeated tokens,
    keeping the first occurrence of each.

    **Example:**

    ```py
    dedupe_class_tokens("one  two one ")  # "one two"
    ```
    """
    tokens = WHITESPACE_RE.split(classes.strip())
    return " ".join(dict.fromkeys(token for token in tokens if token))
