import re
from typing import Callable

from django.http import HttpRequest, HttpResponse

from django_document.app_settings import app_settings
from django_document.document import Document
from django_document.util.logger import logger

end_head_tag_re = re.compile(r"</head\s*>")
end_body_tag_re = re.compile(r"</body\s*>")


def get_document(request: HttpRequest) -> Document:
    """
    Return the `Document` of the request,
    creating it if the request doesn't have one yet.
    """
    document = getattr(request, "document", None)
    if not isinstance(document, Document):
        document = Document()
        request.document = document  # type: ignore[attr-defined]
    return document


class DocumentMiddleware:
    """
    Attaches a fresh `Document` to each request
    as `request.document`.

    If `DOCUMENT["insert_default_locations"]` is `True`, the head and footer tags
    are also inserted into HTML responses, before the first `</head>` and before
    the last `</body>`. A phase the template already rendered (e.g. with
    `{% document_head %}`) is not inserted again.

    ```python
    MIDDLEWARE = [
        ...,
        "django_document.middleware.DocumentMiddleware",
    ]
    ```
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request.document = Document()  # type: ignore[attr-defined]
        response = self.get_response(request)

        if app_settings.INSERT_DEFAULT_LOCATIONS:
            self.process_document(request.document, response)  # type: ignore[attr-defined]
        return response

    def process_document(self, document: Document, response: HttpResponse) -> None:
        if getattr(response, "streaming", False):
            return
        if not response.get("Content-Type", "").startswith("text/html"):
            return

        head_content = None if document.head_built else document.render_head()
        footer_content = None if document.footer_built else document.render_footer()

        charset = response.charset
        updated = _insert_to_default_locations(
            response.content.decode(charset),
            head_content=head_content or None,
            footer_content=footer_content or None,
        )
        if updated is None:
            return

        logger.debug("Inserted document tags into response of %s", response.get("Content-Type"))
        response.content = updated.encode(charset)
        if response.has_header("Content-Length"):
            response["Content-Length"] = str(len(response.content))


def _insert_to_default_locations(
    html_content: str,
    head_content: str | None,
    footer_content: str | None,
) -> str | None:
    """
    Insert the head content before the first `</head>`, and the footer content
    before the last `</body>`.

    Returns `None` if nothing was inserted.
    """
    insertions: list[tuple[int, str]] = []

    if head_content is not None:
        head_match = end_head_tag_re.search(html_content)
        if head_match:
            insertions.append((head_match.start(), head_content))

    if footer_content is not None:
        body_matches = list(end_body_tag_re.finditer(html_content))
        if body_matches:
            insertions.append((body_matches[-1].start(), footer_content))

    if not insertions:
        return None

    # From the end, so that the earlier index stays valid
    for index, content in sorted(insertions, reverse=True):
        html_content = html_content[:index] + content + "\n" + html_content[index:]
    return html_content
