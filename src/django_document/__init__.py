"""Collect the meta tags, styles and scripts of an HTML page, and render them in order."""

# Public API
# isort: off
from django_document.app_settings import DocumentSettings
from django_document.assets import Asset, AssetKind, AssetVersion, Placement, Preparation, Script, Style
from django_document.attributes import AttrValue, format_attributes
from django_document.dependencies import resolve_dependencies
from django_document.document import Document
from django_document.middleware import DocumentMiddleware, get_document
from django_document.registry import AssetRegistry

# isort: on

__all__ = [
    "Asset",
    "AssetKind",
    "AssetRegistry",
    "AssetVersion",
    "AttrValue",
    "Document",
    "DocumentMiddleware",
    "DocumentSettings",
    "Placement",
    "Preparation",
    "Script",
    "Style",
    "format_attributes",
    "get_document",
    "resolve_dependencies",
]
