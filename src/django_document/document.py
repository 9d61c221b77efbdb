import os
from collections.abc import Iterable
from contextlib import contextmanager
from typing import Any, Generator, overload

from django.utils.html import escape
from django.utils.safestring import SafeString, mark_safe

from django_document import types
from django_document.app_settings import app_settings
from django_document.assets import AssetVersion, Placement, Preparation, Script, Style
from django_document.attributes import AttrValue, format_attributes, normalize_class_attribute
from django_document.dependencies import resolve_dependencies
from django_document.registry import AssetRegistry
from django_document.util.logger import logger, trace_asset_msg
from django_document.util.misc import is_nonempty_str
from django_document.util.paths import build_asset_url, normalize_public_dir, transform_path

AttrsDict = dict[str, AttrValue]

HTTP_EQUIV_META = ("content-security-policy", "content-type", "default-style", "x-ua-compatible", "refresh")
# Meta tags that declare the encoding go before anything else in the `<head>`
ENCODING_META = ("charset", "content-type")


def _normalize_name(name: str) -> str:
    return name.strip().lower()


class Document:
    """
    Everything that goes into the `<html>`, `<head>` and `<body>` tags of one HTML page,
    collected while handling a request and rendered once the page template gets to it.

    Styles and scripts are registered under a handle, and then "added" to be rendered.
    The document works out their order from their dependencies, and renders each one
    only once, even when the head and the footer are built at different times.

    **Example:**

    ```python
    document = Document(base_url="https://example.com/")
    document.title = "My article"
    document.set_meta("description", "All about my article")
    document.register_style("bootstrap", "assets/bootstrap.css")
    document.register_script("jquery", "assets/jquery.js", placement="head")
    document.register_script("app", "assets/app.js", dependencies=["jquery"])
    document.add_libraries("bootstrap", "app")

    document.render_head()
    # <title>My article</title>
    # <meta name="description" content="All about my article" />
    # <link id="bootstrap-css" rel="stylesheet" href="https://example.com/assets/bootstrap.css" />
    # <script id="jquery-js" src="https://example.com/assets/jquery.js"></script>

    document.render_footer()
    # <script id="app-js" src="https://example.com/assets/app.js"></script>
    ```

    Inside a Django project, use `DocumentMiddleware`
    to get one document per request as `request.document`.
    """

    def __init__(
        self,
        public_dir: str | os.PathLike | None = None,
        base_url: str | None = None,
        style_added_by_script: bool | None = None,
    ) -> None:
        self.public_dir = normalize_public_dir(public_dir if public_dir is not None else app_settings.PUBLIC_DIR)
        self.base_url = base_url if base_url is not None else app_settings.BASE_URL
        self.style_added_by_script = (
            style_added_by_script if style_added_by_script is not None else app_settings.STYLE_ADDED_BY_SCRIPT
        )

        self.styles: AssetRegistry[Style] = AssetRegistry("css")
        self.scripts: AssetRegistry[Script] = AssetRegistry("js")

        self.html_attributes: AttrsDict = {}
        self.body_attributes: AttrsDict = {}
        self.meta: dict[str, AttrsDict] = {}
        self.links: dict[str, list[AttrsDict]] = {}
        self.custom_head_content: types.html = ""
        self.custom_footer_content: types.html = ""
        self._title = ""
        self._title_suffix = ""

        self.head_built = False
        self.footer_built = False

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} title={self._title!r} styles={self.styles!r} scripts={self.scripts!r}>"

    ##########################################
    # PATHS
    ##########################################

    def transform_path(self, path: str) -> str:
        """Turn an absolute path or a URL of this site into a path relative to `public_dir`."""
        return transform_path(path, self.public_dir, self.base_url)

    def build_url(self, src: str, version: AssetVersion = "") -> str:
        """URL of an asset, as it's rendered in `href` / `src`, including `?ver=`."""
        return build_asset_url(src, version, self.public_dir, self.base_url)

    ##########################################
    # HTML AND BODY ATTRIBUTES
    ##########################################

    # Use `None` to remove an attribute. Use `""` to add an attribute without a value.

    @overload
    def get_html_attributes(self, name: str) -> AttrValue: ...

    @overload
    def get_html_attributes(self, name: None = None) -> AttrsDict: ...

    def get_html_attributes(self, name: str | None = None) -> AttrValue | AttrsDict:
        if name is None:
            return self.html_attributes
        return self.html_attributes.get(name)

    def set_html_attributes(self, attrs: AttrsDict) -> "Document":
        self.html_attributes = dict(attrs)
        return self

    def add_html_attributes(self, attrs: AttrsDict) -> "Document":
        self.html_attributes.update(attrs)
        return self

    def add_html_classes(self, *classes: str) -> "Document":
        _append_classes(self.html_attributes, classes)
        return self

    def build_html(self) -> AttrsDict:
        self.html_attributes = normalize_class_attribute(self.html_attributes)
        return dict(self.html_attributes)

    def render_html(self) -> SafeString:
        """Attributes of the `<html>` tag, e.g. `lang="en" class="no-js"`."""
        return format_attributes(self.build_html())

    @overload
    def get_body_attributes(self, name: str) -> AttrValue: ...

    @overload
    def get_body_attributes(self, name: None = None) -> AttrsDict: ...

    def get_body_attributes(self, name: str | None = None) -> AttrValue | AttrsDict:
        if name is None:
            return self.body_attributes
        return self.body_attributes.get(name)

    def set_body_attributes(self, attrs: AttrsDict) -> "Document":
        self.body_attributes = dict(attrs)
        return self

    def add_body_attributes(self, attrs: AttrsDict) -> "Document":
        self.body_attributes.update(attrs)
        return self

    def add_body_classes(self, *classes: str) -> "Document":
        _append_classes(self.body_attributes, classes)
        return self

    def build_body(self) -> AttrsDict:
        self.body_attributes = normalize_class_attribute(self.body_attributes)
        return dict(self.body_attributes)

    def render_body(self) -> SafeString:
        """Attributes of the `<body>` tag."""
        return format_attributes(self.build_body())

    ##########################################
    # TITLE, META, LINKS
    ##########################################

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, title: str) -> None:
        self._title = title.strip()

    @property
    def title_suffix(self) -> str:
        """Added after the title, e.g. `| My Website`."""
        return self._title_suffix

    @title_suffix.setter
    def title_suffix(self, title_suffix: str) -> None:
        self._title_suffix = title_suffix.strip()

    @overload
    def get_meta(self, name: str) -> AttrsDict | None: ...

    @overload
    def get_meta(self, name: None = None) -> dict[str, AttrsDict]: ...

    def get_meta(self, name: str | None = None) -> AttrsDict | dict[str, AttrsDict] | None:
        if name is None:
            return self.meta
        return self.meta.get(_normalize_name(name))

    def set_meta(self, name: str, content: str, attrs: AttrsDict | None = None) -> "Document":
        """
        Add or replace a `<meta>` tag. Whether it's rendered with `name`, `property`
        or `http-equiv` depends on the name:

        - `charset` - `<meta charset="utf-8" />`
        - `content-security-policy`, `content-type`, `default-style`, `x-ua-compatible`
            and `refresh` - `<meta http-equiv="refresh" content="30" />`
        - Names with a colon (Open Graph), except for those starting with `twitter:` -
            `<meta property="og:type" content="article" />`
        - Everything else - `<meta name="description" content="..." />`
        """
        name = _normalize_name(name)

        data: AttrsDict
        if name == "charset":
            data = {"charset": content}
        elif name in HTTP_EQUIV_META:
            data = {"http-equiv": name, "content": content}
        elif ":" in name and name.split(":", 1)[0] != "twitter":
            data = {"property": name, "content": content}
        else:
            data = {"name": name, "content": content}

        self.meta[name] = {**data, **(attrs or {})}
        return self

    def remove_meta(self, name: str | None = None) -> "Document":
        """Remove the `<meta>` tag with given name, or all of them when no name is given."""
        if name is None:
            self.meta = {}
        else:
            self.meta.pop(_normalize_name(name), None)
        return self

    @overload
    def get_links(self, rel: str) -> list[AttrsDict] | None: ...

    @overload
    def get_links(self, rel: None = None) -> dict[str, list[AttrsDict]]: ...

    def get_links(self, rel: str | None = None) -> list[AttrsDict] | dict[str, list[AttrsDict]] | None:
        if rel is None:
            return self.links
        return self.links.get(_normalize_name(rel))

    def add_link(self, rel: str, href: str, attrs: AttrsDict | None = None) -> "Document":
        """
        Add a `<link>` tag. If there already is one with the same `rel` and `href`,
        its attributes are updated instead.
        """
        rel = _normalize_name(rel)
        href = href.strip()
        attrs = {key: value for key, value in (attrs or {}).items() if key != "href"}

        group = self.links.setdefault(rel, [])
        for link in group:
            if link["href"] == href:
                link.update(attrs)
                return self

        group.append({"href": href, **attrs})
        return self

    def remove_links(self, rel: str | None = None, href: str | None = None) -> "Document":
        """
        Remove `<link>` tags:

        - No arguments - all links.
        - Only `rel` - all links with that relation.
        - Both - the one link with that relation and URL.
        """
        if rel is None:
            self.links = {}
            return self

        rel = _normalize_name(rel)
        if href is None:
            self.links.pop(rel, None)
            return self

        href = href.strip()
        group = self.links.get(rel, [])
        for index, link in enumerate(group):
            if link["href"] == href:
                del group[index]
                break
        return self

    ##########################################
    # STYLES
    ##########################################

    def register_style(
        self,
        handle: str,
        src: str,
        dependencies: Iterable[str] = (),
        version: AssetVersion = "",
        attrs: AttrsDict | None = None,
    ) -> "Document":
        """
        Register a stylesheet loaded from `src`. Registering the same handle again
        replaces the previous definition.

        `src` can be relative to `base_url`, an absolute path inside `public_dir`,
        or an external URL. Set `version=True` to use the file's modification time.
        """
        self.styles.register(
            Style(handle, src=src, dependencies=list(dependencies), version=version, attrs=dict(attrs or {}))
        )
        return self

    def register_inline_style(
        self,
        handle: str,
        inline: types.css,
        dependencies: Iterable[str] = (),
        attrs: AttrsDict | None = None,
    ) -> "Document":
        self.styles.register(Style(handle, inline=inline, dependencies=list(dependencies), attrs=dict(attrs or {})))
        return self

    def prepare_style(self, handle: str, preparation: Preparation) -> "Document":
        """
        Call `preparation(document, style)` right before the style is rendered in the head.
        The callback may set meta, links or custom content, but cannot register,
        add or remove assets.
        """
        style = self.styles.get(handle)
        if style is None:
            logger.debug("Cannot set preparation of unknown style '%s'", handle)
        else:
            style.set_preparation(preparation)
        return self

    def add_styles(self, *handles: str) -> "Document":
        self.styles.add(*handles)
        return self

    def remove_styles(self, *handles: str) -> "Document":
        self.styles.remove(*handles)
        return self

    @overload
    def get_styles(self, handle: str) -> Style | None: ...

    @overload
    def get_styles(self, handle: None = None) -> dict[str, Style]: ...

    def get_styles(self, handle: str | None = None) -> Style | dict[str, Style] | None:
        return self.styles.get(handle)

    def get_added_styles(self) -> list[str]:
        """Handles of styles that were added explicitly, not those pulled in as dependencies."""
        return self.styles.get_added()

    def has_added_style(self, handle: str) -> bool:
        return self.styles.is_added(handle)

    def get_rendered_styles(self) -> list[str]:
        return self.styles.get_rendered()

    ##########################################
    # SCRIPTS
    ##########################################

    def register_script(
        self,
        handle: str,
        src: str,
        dependencies: Iterable[str] = (),
        version: AssetVersion = "",
        attrs: AttrsDict | None = None,
        placement: Placement = "footer",
    ) -> "Document":
        """
        Register a script loaded from `src`. By default scripts are rendered in the footer,
        set `placement="head"` to render it in the `<head>`.

        A head script that depends on a footer script moves that script to the head.
        """
        self.scripts.register(
            Script(
                handle,
                src=src,
                dependencies=list(dependencies),
                version=version,
                attrs=dict(attrs or {}),
                placement=placement,
            )
        )
        return self

    def register_inline_script(
        self,
        handle: str,
        inline: types.js,
        dependencies: Iterable[str] = (),
        attrs: AttrsDict | None = None,
        placement: Placement = "footer",
    ) -> "Document":
        self.scripts.register(
            Script(
                handle,
                inline=inline,
                dependencies=list(dependencies),
                attrs=dict(attrs or {}),
                placement=placement,
            )
        )
        return self

    def prepare_script(self, handle: str, preparation: Preparation) -> "Document":
        """
        Call `preparation(document, script)` right before the script is rendered.
        The callback may set meta, links or custom content, but cannot register,
        add or remove assets.
        """
        script = self.scripts.get(handle)
        if script is None:
            logger.debug("Cannot set preparation of unknown script '%s'", handle)
        else:
            script.set_preparation(preparation)
        return self

    def localize_script(self, handle: str, name: str, data: Any) -> "Document":
        """
        Render `data` as a global JS variable `name`, right before the script.

        **Example:**

        ```python
        document.localize_script("app", "appSettings", {"ajaxUrl": "/ajax/"})
        ```

        renders

        ```html
        <script id="app-js-extra">var appSettings = {"ajaxUrl":"\\/ajax\\/"};</script>
        <script id="app-js" src="/assets/app.js"></script>
        ```
        """
        script = self.scripts.get(handle)
        if script is None:
            logger.debug("Cannot localize unknown script '%s'", handle)
        else:
            script.set_localization(name, data)
        return self

    def add_scripts(self, *handles: str) -> "Document":
        self.scripts.add(*handles)
        return self

    def remove_scripts(self, *handles: str) -> "Document":
        self.scripts.remove(*handles)
        return self

    @overload
    def get_scripts(self, handle: str) -> Script | None: ...

    @overload
    def get_scripts(self, handle: None = None) -> dict[str, Script]: ...

    def get_scripts(self, handle: str | None = None) -> Script | dict[str, Script] | None:
        return self.scripts.get(handle)

    def get_added_scripts(self) -> list[str]:
        """Handles of scripts that were added explicitly, not those pulled in as dependencies."""
        return self.scripts.get_added()

    def has_added_script(self, handle: str) -> bool:
        return self.scripts.is_added(handle)

    def get_rendered_scripts(self) -> list[str]:
        return self.scripts.get_rendered()

    def add_libraries(self, *handles: str) -> "Document":
        """Add both the styles and the scripts with given handles."""
        self.add_styles(*handles)
        self.add_scripts(*handles)
        return self

    ##########################################
    # BUILDING
    ##########################################

    @contextmanager
    def _locked_assets(self) -> Generator[None, None, None]:
        # Builds may be nested, when a preparation callback builds the document
        was_locked = (self.styles.locked, self.scripts.locked)
        self.styles.locked = True
        self.scripts.locked = True
        try:
            yield
        finally:
            self.styles.locked, self.scripts.locked = was_locked

    def _render_assets(
        self,
        registry: AssetRegistry,
        allow_footer: bool,
        prepare: bool = True,
        link_styles: bool = False,
    ) -> list[SafeString]:
        resolved = resolve_dependencies(
            registry.definitions,
            registry.added,
            registry.rendered,
            allow_footer=allow_footer,
        )

        tags: list[SafeString] = []
        for handle, asset in resolved.items():
            if prepare and asset.preparation is not None:
                trace_asset_msg("PREPARE", asset.kind, handle)
                asset.preparation(self, asset)

            trace_asset_msg("RENDER", asset.kind, handle, "footer" if allow_footer else "head")
            tags.append(asset.render(self))
            registry.mark_rendered(handle)

            if link_styles:
                self.styles.add(handle, force=True)
        return tags

    def _build_meta_tag(self, meta: AttrsDict) -> SafeString:
        return mark_safe(f"<meta {format_attributes(meta)} />")

    def build_head(self) -> list[SafeString]:
        """
        Build the tags that go inside the `<head>` tag, in this order:

        1. `<meta charset>` and `<meta http-equiv="content-type">`
        2. `<title>`
        3. Other `<meta>` tags
        4. `<link>` tags, grouped by `rel`
        5. `custom_head_content`
        6. Styles
        7. Head scripts

        Styles and scripts are processed first, because their preparation callbacks
        may still change the meta, links and custom content.
        """
        result: list[SafeString] = []

        with self._locked_assets():
            if self.style_added_by_script:
                # Go through head *and* footer scripts, to add the styles of all the scripts
                # that will be used in the document.
                all_scripts = resolve_dependencies(
                    self.scripts.definitions,
                    self.scripts.added,
                    allow_footer=True,
                )
                if all_scripts:
                    self.styles.add(*all_scripts, force=True)

            styles = self._render_assets(self.styles, allow_footer=True)
            scripts = self._render_assets(self.scripts, allow_footer=False)

            for name in ENCODING_META:
                if self.meta.get(name):
                    result.append(self._build_meta_tag(self.meta[name]))

            if self._title:
                title = self._title
                if self._title_suffix:
                    title += " " + self._title_suffix
                result.append(mark_safe(f"<title>{escape(title)}</title>"))

            for name, meta in self.meta.items():
                if name not in ENCODING_META:
                    result.append(self._build_meta_tag(meta))

            for rel, group in self.links.items():
                for link in group:
                    result.append(mark_safe(f"<link {format_attributes({'rel': rel, **link})} />"))

            if self.custom_head_content:
                result.append(mark_safe(self.custom_head_content))

        self.head_built = True
        return [*result, *styles, *scripts]

    def render_head(self) -> SafeString:
        return mark_safe("\n".join(self.build_head()))

    def build_footer(self) -> list[SafeString]:
        """
        Build the tags that go right before the closing `</body>` tag:

        1. `custom_footer_content`
        2. Styles that were added after the head was built
        3. Footer scripts, and head scripts that were added after the head was built

        Preparation callbacks of late styles are not called.
        """
        result: list[SafeString] = []

        with self._locked_assets():
            # Scripts go first, so that the styles they add are rendered too
            scripts = self._render_assets(self.scripts, allow_footer=True, link_styles=self.style_added_by_script)

            if self.custom_footer_content:
                result.append(mark_safe(self.custom_footer_content))

            result.extend(self._render_assets(self.styles, allow_footer=True, prepare=False))

        self.footer_built = True
        return [*result, *scripts]

    def render_footer(self) -> SafeString:
        return mark_safe("\n".join(self.build_footer()))


def _append_classes(attributes: AttrsDict, classes: Iterable[str]) -> None:
    current = attributes.get("class")
    joined = " ".join(classes)
    if is_nonempty_str(current):
        attributes["class"] = f"{current} {joined}"
    else:
        attributes["class"] = joined
