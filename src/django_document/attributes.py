from collections.abc import Mapping
from typing import TypeAlias

from django.utils.html import conditional_escape, format_html
from django.utils.safestring import SafeString, mark_safe

from django_document.util.misc import dedupe_class_tokens

AttrValue: TypeAlias = str | bool | int | float | None
"""
Value of a single HTML attribute:

- `None` or `False` - the attribute is removed / not rendered.
- `""` or `True` - the attribute is rendered without a value, e.g. `async`.
- Anything else - rendered as `name="value"`, with the value HTML-escaped.
"""

Attrs: TypeAlias = Mapping[str, AttrValue]


def format_attributes(attributes: Attrs) -> SafeString:
    """
    Format a dict of attributes into an HTML attributes string.

    Names and values are trimmed. The order of the dict is preserved.

    **Example:**

    ```py
    format_attributes({"lang": "en", "async": "", "hidden": None})
    # 'lang="en" async'
    ```
    """
    parts: list[str] = []
    for key, value in attributes.items():
        if value is None or value is False:
            continue

        name = str(key).strip()
        text = "" if value is True else str(value).strip()

        if text == "":
            parts.append(conditional_escape(name))
        else:
            parts.append(format_html('{}="{}"', name, text))

    return mark_safe(" ".join(parts))


def merge_attributes(defaults: Attrs, overrides: Attrs | None) -> dict[str, AttrValue]:
    """
    Merge user-defined attributes onto the generated ones.

    Overridden keys keep their original position, new keys are appended.
    """
    return {**defaults, **(overrides or {})}


def normalize_class_attribute(attributes: Attrs) -> dict[str, AttrValue]:
    """
    Return a copy of the attributes where the `class` value has its whitespace
    collapsed and repeated class names removed.
    """
    result = dict(attributes)
    classes = result.get("class")
    if isinstance(classes, str) and classes:
        result["class"] = dedupe_class_tokens(classes)
    return result
