"""Style and script definitions, and how they render into HTML tags."""

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Literal, TypeAlias

from django.core.serializers.json import DjangoJSONEncoder
from django.utils.html import escapejs
from django.utils.safestring import SafeString, mark_safe

from django_document.attributes import AttrValue, format_attributes, merge_attributes
from django_document.util.misc import is_nonempty_str

if TYPE_CHECKING:
    from django_document.document import Document


AssetKind: TypeAlias = Literal["css", "js"]
Placement: TypeAlias = Literal["head", "footer"]
AssetVersion: TypeAlias = str | Literal[True]
"""
Version of an asset, appended to the URL as `?ver=...`:

- `""` - no version.
- `"1.2.3"` - literal version.
- `True` - use the modification time of the file. Ignored for external URLs.
"""

Preparation: TypeAlias = Callable[["Document", Any], None]

PLACEMENTS = ("head", "footer")


@dataclass
class Asset:
    """
    Base class for a style or a script registered in a `Document`.

    The content of the asset is either:

    - Fetched from a URL (`src`), rendered as `<link href="...">` or `<script src="...">`
    - Inlined (`inline`), rendered as `<style>...</style>` or `<script>...</script>`

    Setting one clears the other.
    """

    kind: ClassVar[AssetKind]

    handle: str
    """Unique identifier within its own kind. Styles and scripts may share handles."""
    src: str = ""
    """Relative path, absolute path inside the public directory, or an external URL."""
    inline: str = ""
    """Raw CSS or JS placed inside the tag."""
    dependencies: list[str] = field(default_factory=list)
    """Handles of assets of the same kind that must be rendered before this one."""
    version: AssetVersion = ""
    attrs: dict[str, AttrValue] = field(default_factory=dict)
    """Extra HTML attributes. They override the generated ones (e.g. `id`)."""
    preparation: Preparation | None = None
    """Called as `preparation(document, asset)` right before the asset is rendered."""

    def __post_init__(self) -> None:
        if not is_nonempty_str(self.handle):
            raise ValueError(f"{self.__class__.__name__} handle must be a non-empty string, got {self.handle!r}")
        self.handle = self.handle.strip()
        self.src = self.src.strip()
        self.dependencies = [dep.strip() for dep in self.dependencies]
        if self.src and self.inline:
            raise ValueError(f"{self._err_msg()} cannot have both `src` and `inline` content")
        self.set_version(self.version)

    def set_src(self, src: str) -> "Asset":
        self.src = src.strip()
        self.inline = ""
        return self

    def set_inline(self, inline: str) -> "Asset":
        self.inline = inline
        self.src = ""
        return self

    def set_version(self, version: AssetVersion) -> "Asset":
        self.version = True if version is True else str(version or "").strip()
        return self

    def set_attrs(self, attrs: dict[str, AttrValue]) -> "Asset":
        self.attrs = dict(attrs)
        return self

    def set_preparation(self, preparation: Preparation | None) -> "Asset":
        self.preparation = preparation
        return self

    def _tag_id(self, inline: bool) -> str:
        return f"{self.handle}-inline-{self.kind}" if inline else f"{self.handle}-{self.kind}"

    def _render(self, document: "Document") -> str:
        if self.inline:
            all_attrs = merge_attributes({"id": self._tag_id(inline=True)}, self.attrs)
            tag_name = "style" if self.kind == "css" else "script"
            return f"<{tag_name} {format_attributes(all_attrs)}>{self.inline}</{tag_name}>"

        url = document.build_url(self.src, self.version)
        if self.kind == "css":
            all_attrs = merge_attributes({"id": self._tag_id(inline=False), "rel": "stylesheet", "href": url}, self.attrs)
            return f"<link {format_attributes(all_attrs)} />"

        all_attrs = merge_attributes({"id": self._tag_id(inline=False), "src": url}, self.attrs)
        return f"<script {format_attributes(all_attrs)}></script>"

    def render(self, document: "Document") -> SafeString:
        """Render as HTML tag(s)."""
        return mark_safe(self._render(document))

    def _err_msg(self) -> str:
        return f"{self.__class__.__name__} '{self.handle}'"


@dataclass
class Style(Asset):
    """
    A stylesheet, rendered as `<link rel="stylesheet">` or as `<style>` when inlined.

    Styles are always rendered in the `<head>`, unless they are added after the head
    was already built, in which case they are rendered with the footer.

    **Example:**

    ```python
    Style("bootstrap", src="https://cdn.jsdelivr.net/npm/bootstrap@5.2.3/dist/css/bootstrap.min.css")
    ```

    becomes

    ```html
    <link id="bootstrap-css" rel="stylesheet" href="https://cdn.jsdelivr.net/npm/bootstrap@5.2.3/dist/css/bootstrap.min.css" />
    ```
    """

    kind: ClassVar[AssetKind] = "css"


@dataclass
class Script(Asset):
    """
    A script, rendered as `<script src="...">` or `<script>...</script>` when inlined.

    **Example:**

    ```python
    script = Script("app", src="assets/app.js", placement="head")
    script.set_localization("appData", {"lang": "en"})
    ```

    becomes

    ```html
    <script id="app-js-extra">var appData = {"lang":"en"};</script>
    <script id="app-js" src="/assets/app.js"></script>
    ```
    """

    kind: ClassVar[AssetKind] = "js"

    placement: Placement = "footer"
    """Whether the script goes to the `<head>` or to the end of the `<body>`."""
    localization_name: str = ""
    """Name of the global JS variable that holds `localization_data`."""
    localization_data: Any = None
    """JSON-serializable data rendered as a `var` statement right before the script."""

    def __post_init__(self) -> None:
        super().__post_init__()
        self.set_placement(self.placement)

    @property
    def in_footer(self) -> bool:
        return self.placement == "footer"

    def set_placement(self, placement: Placement) -> "Script":
        if placement not in PLACEMENTS:
            raise ValueError(f"{self._err_msg()} has invalid placement {placement!r}, expected one of {PLACEMENTS}")
        self.placement = placement
        return self

    def set_localization(self, name: str, data: Any) -> "Script":
        self.localization_name = name.strip()
        self.localization_data = data
        return self

    def _render(self, document: "Document") -> str:
        tag = super()._render(document)
        if self.inline or not self.localization_data:
            return tag

        # `/` is escaped so that the data can never close the `<script>` tag
        json_data = json.dumps(
            self.localization_data,
            cls=DjangoJSONEncoder,
            ensure_ascii=False,
            separators=(",", ":"),
        ).replace("/", "\\/")
        extra_attrs = format_attributes({"id": f"{self.handle}-js-extra"})
        extra = f"<script {extra_attrs}>var {escapejs(self.localization_name)} = {json_data};</script>"
        return f"{extra}\n{tag}"
