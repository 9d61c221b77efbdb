import os
from typing import Any, NamedTuple

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


class DocumentSettings(NamedTuple):
    """
    Settings available for django_document.

    Set them in your `settings.py` under the `DOCUMENT` key:

    ```python
    DOCUMENT = {
        "base_url": "https://example.com/",
        "public_dir": BASE_DIR / "public",
    }
    ```
    """

    base_url: str | None = None
    """
    URL prepended to relative asset paths, e.g. `assets/app.js` becomes
    `https://example.com/assets/app.js`. Absolute URLs starting with this prefix
    are treated as local files.

    Defaults to `"/"`.
    """

    public_dir: str | os.PathLike | None = None
    """
    Directory that `base_url` points to. Used to strip absolute filesystem paths
    down to relative ones, and to look up file modification times for `version=True`.

    Defaults to `STATIC_ROOT`, then `BASE_DIR`, then the current working directory.
    """

    style_added_by_script: bool | None = None
    """
    If `True`, adding a script also adds the style with the same handle.

    Defaults to `True`.
    """

    insert_default_locations: bool | None = None
    """
    If `True`, `DocumentMiddleware`
    inserts the head tags before `</head>` and the footer tags before `</body>`
    of HTML responses, unless the template already rendered them.

    Defaults to `False`.
    """


class InternalSettings:
    """
    Lazy access to `settings.DOCUMENT`, so that `override_settings()` works in tests.
    """

    @property
    def _settings(self) -> DocumentSettings:
        data: Any = getattr(settings, "DOCUMENT", None) or {}
        if isinstance(data, DocumentSettings):
            return data
        if not isinstance(data, dict):
            raise ImproperlyConfigured(f"settings.DOCUMENT must be a dict, got {type(data).__name__}")

        unknown = set(data) - set(DocumentSettings._fields)
        if unknown:
            raise ImproperlyConfigured(
                f"Unknown settings.DOCUMENT keys: {', '.join(sorted(unknown))}. "
                f"Valid keys are: {', '.join(DocumentSettings._fields)}"
            )
        return DocumentSettings(**data)

    @property
    def BASE_URL(self) -> str:
        base_url = self._settings.base_url
        return "/" if base_url is None else base_url

    @property
    def PUBLIC_DIR(self) -> str:
        public_dir = self._settings.public_dir
        if public_dir is None:
            public_dir = getattr(settings, "STATIC_ROOT", None) or getattr(settings, "BASE_DIR", None) or os.getcwd()
        return os.fspath(public_dir)

    @property
    def STYLE_ADDED_BY_SCRIPT(self) -> bool:
        value = self._settings.style_added_by_script
        return True if value is None else value

    @property
    def INSERT_DEFAULT_LOCATIONS(self) -> bool:
        value = self._settings.insert_default_locations
        return False if value is None else value


app_settings = InternalSettings()
