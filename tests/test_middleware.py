from django.http import HttpResponse, StreamingHttpResponse
from django.template import RequestContext, Template
from django.test import RequestFactory
from pytest_django.asserts import assertHTMLEqual

from django_document import Document, DocumentMiddleware, get_document
from django_document.middleware import _insert_to_default_locations
from django_document.testing import document_test

from .testutils import setup_test_config

setup_test_config()


def page_view(request):
    # Like a view that adds assets while rendering the body, after the layout's `<head>`
    document: Document = request.document
    document.register_style("one", "one.css")
    document.register_script("two", "two.js", placement="head")
    document.register_script("three", "three.js")
    document.add_libraries("one", "two", "three")
    return HttpResponse("<html><head><title>x</title></head><body><p>Test</p></body></html>")


class TestGetDocument:
    def test_creates_document(self):
        request = RequestFactory().get("/")

        document = get_document(request)

        assert isinstance(document, Document)
        assert get_document(request) is document
        assert request.document is document  # type: ignore[attr-defined]


@document_test
class TestDocumentMiddleware:
    def test_document_per_request(self):
        documents = []

        def view(request):
            documents.append(request.document)
            return HttpResponse("")

        middleware = DocumentMiddleware(view)
        middleware(RequestFactory().get("/"))
        middleware(RequestFactory().get("/"))

        assert len(documents) == 2
        assert documents[0] is not documents[1]

    def test_no_insertion_by_default(self):
        response = DocumentMiddleware(page_view)(RequestFactory().get("/"))

        assert response.content.decode() == "<html><head><title>x</title></head><body><p>Test</p></body></html>"

    @document_test(document_settings={"insert_default_locations": True})
    def test_insert_default_locations(self):
        response = DocumentMiddleware(page_view)(RequestFactory().get("/"))

        assertHTMLEqual(
            response.content.decode(),
            """
            <html>
            <head>
                <title>x</title>
                <link id="one-css" rel="stylesheet" href="https://example.com/one.css" />
                <script id="two-js" src="https://example.com/two.js"></script>
            </head>
            <body>
                <p>Test</p>
                <script id="three-js" src="https://example.com/three.js"></script>
            </body>
            </html>
            """,
        )

    @document_test(document_settings={"insert_default_locations": True})
    def test_skips_phases_rendered_by_template(self):
        def view(request):
            template = Template(
                """
                {% load document_tags %}
                {% document_add_scripts "one" %}
                <html><head>{% document_head %}</head><body></body></html>
                """
            )
            request.document.register_script("one", "one.js", placement="head")
            request.document.register_script("two", "two.js")
            request.document.add_scripts("two")
            return HttpResponse(template.render(RequestContext(request)))

        response = DocumentMiddleware(view)(RequestFactory().get("/"))
        content = response.content.decode()

        assert content.count('id="one-js"') == 1
        assert content.count('id="two-js"') == 1
        assert content.index('id="two-js"') > content.index("<body>")

    @document_test(document_settings={"insert_default_locations": True})
    def test_content_length_updated(self):
        def view(request):
            request.document.register_script("one", "one.js").add_scripts("one")
            response = HttpResponse("<html><head></head><body></body></html>")
            response["Content-Length"] = str(len(response.content))
            return response

        response = DocumentMiddleware(view)(RequestFactory().get("/"))

        assert response["Content-Length"] == str(len(response.content))

    @document_test(document_settings={"insert_default_locations": True})
    def test_non_html_untouched(self):
        def view(request):
            request.document.register_script("one", "one.js").add_scripts("one")
            return HttpResponse('{"body": "</body>"}', content_type="application/json")

        response = DocumentMiddleware(view)(RequestFactory().get("/"))

        assert response.content == b'{"body": "</body>"}'

    @document_test(document_settings={"insert_default_locations": True})
    def test_streaming_untouched(self):
        def view(request):
            request.document.register_script("one", "one.js").add_scripts("one")
            return StreamingHttpResponse(iter(["<html><body>", "</body></html>"]))

        response = DocumentMiddleware(view)(RequestFactory().get("/"))

        assert b"".join(response.streaming_content) == b"<html><body></body></html>"  # type: ignore[arg-type]


class TestInsertToDefaultLocations:
    def test_first_head_last_body(self):
        html = "<head></head><head></head><body></body><body></body>"

        result = _insert_to_default_locations(html, head_content="<H/>", footer_content="<F/>")

        assert result == "<head><H/>\n</head><head></head><body></body><body><F/>\n</body>"

    def test_nothing_to_insert(self):
        assert _insert_to_default_locations("<head></head>", head_content=None, footer_content=None) is None

    def test_no_tags(self):
        assert _insert_to_default_locations("<p>Hi</p>", head_content="<H/>", footer_content="<F/>") is None

    def test_whitespace_in_tag(self):
        result = _insert_to_default_locations("<body></body >", head_content=None, footer_content="<F/>")

        assert result == "<body><F/>\n</body >"
