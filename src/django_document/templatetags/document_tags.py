"""
Template tags for rendering the `Document` of the current request.

```django
{% load document_tags %}
{% document_add_libraries "bootstrap" "app" %}
<!DOCTYPE html>
<html {% document_html %}>
<head>
    {% document_head %}
</head>
<body {% document_body %}>
    ...
    {% document_footer %}
</body>
</html>
```

Tags that add things render nothing, so they must be used before the tags
that render the part of the document they change.
"""

from typing import Any, Mapping

from django.core.exceptions import ImproperlyConfigured
from django.template import Library
from django.utils.safestring import SafeString

from django_document.document import Document
from django_document.middleware import get_document

register = Library()


def _get_document(context: Mapping[str, Any]) -> Document:
    document = context.get("document")
    if isinstance(document, Document):
        return document

    request = context.get("request")
    if request is not None:
        return get_document(request)

    raise ImproperlyConfigured(
        "Document tags need either `document` or `request` in the template context. "
        "Add 'django_document.context_processors.document' to your template context processors, "
        "or pass the document to the template explicitly."
    )


@register.simple_tag(takes_context=True)
def document_html(context: Mapping[str, Any]) -> SafeString:
    """Attributes of the `<html>` tag."""
    return _get_document(context).render_html()


@register.simple_tag(takes_context=True)
def document_head(context: Mapping[str, Any]) -> SafeString:
    """Meta, title, links, styles and head scripts."""
    return _get_document(context).render_head()


@register.simple_tag(takes_context=True)
def document_body(context: Mapping[str, Any]) -> SafeString:
    """Attributes of the `<body>` tag."""
    return _get_document(context).render_body()


@register.simple_tag(takes_context=True)
def document_footer(context: Mapping[str, Any]) -> SafeString:
    """Custom footer content, late styles and footer scripts."""
    return _get_document(context).render_footer()


@register.simple_tag(takes_context=True)
def document_add_html_classes(context: Mapping[str, Any], *classes: str) -> str:
    _get_document(context).add_html_classes(*classes)
    return ""


@register.simple_tag(takes_context=True)
def document_add_body_classes(context: Mapping[str, Any], *classes: str) -> str:
    _get_document(context).add_body_classes(*classes)
    return ""


@register.simple_tag(takes_context=True)
def document_add_styles(context: Mapping[str, Any], *handles: str) -> str:
    _get_document(context).add_styles(*handles)
    return ""


@register.simple_tag(takes_context=True)
def document_add_scripts(context: Mapping[str, Any], *handles: str) -> str:
    _get_document(context).add_scripts(*handles)
    return ""


@register.simple_tag(takes_context=True)
def document_add_libraries(context: Mapping[str, Any], *handles: str) -> str:
    _get_document(context).add_libraries(*handles)
    return ""
