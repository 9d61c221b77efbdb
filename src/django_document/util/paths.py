import os
from urllib.parse import quote, urlsplit

from django_document.util.logger import logger


def normalize_public_dir(public_dir: str | os.PathLike) -> str:
    """Public directory as a string that always ends with exactly one `/`."""
    return os.fspath(public_dir).rstrip("/") + "/"


def is_external(path: str) -> bool:
    """True if the path is a URL with a host, e.g. `https://cdn.example.com/x.js` or `//cdn/x.js`."""
    return bool(urlsplit(path).netloc)


def transform_path(path: str, public_dir: str, base_url: str) -> str:
    """
    Turn an asset path into a path relative to the public directory.

    - Absolute filesystem paths inside `public_dir` lose the `public_dir` prefix.
    - URLs that point at this site (start with an absolute `base_url`) lose
        the `base_url` prefix.
    - Leading slashes are removed.

    External URLs that point elsewhere are returned unchanged.
    """
    path = path.strip()

    if public_dir and path.startswith(public_dir):
        path = path[len(public_dir) :]

    if is_external(path) and is_external(base_url) and path.startswith(base_url):
        path = path[len(base_url) :]

    if is_external(path):
        return path
    return path.lstrip("/")


def get_file_version(path: str, public_dir: str) -> str:
    """
    Version string derived from the modification time of `public_dir + path`.

    Returns an empty string when the file cannot be read.
    """
    full_path = public_dir + path
    try:
        return str(int(os.path.getmtime(full_path)))
    except OSError:
        logger.warning("Cannot read modification time of '%s', rendering it without a version", full_path)
        return ""


def build_asset_url(src: str, version: str | bool, public_dir: str, base_url: str) -> str:
    """
    Resolve an asset source to the URL that goes into `href` / `src`.

    Relative paths are joined with `base_url`. When `version` is `True`, the file
    modification time is used as the version, which only works for local files.
    """
    src = transform_path(src, public_dir, base_url)

    if not is_external(src):
        if version is True:
            version = get_file_version(src, public_dir)
        src = base_url.rstrip("/") + "/" + src
    elif version is True:
        version = ""

    if version:
        src += "?ver=" + quote(str(version), safe="")
    return src
