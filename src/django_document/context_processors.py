from typing import Any

from django.http import HttpRequest

from django_document.middleware import get_document


def document(request: HttpRequest) -> dict[str, Any]:
    """
    Make the request's `Document` available
    in templates as `document`.

    ```python
    TEMPLATES = [
        {
            ...,
            "OPTIONS": {
                "context_processors": [
                    ...,
                    "django_document.context_processors.document",
                ],
            },
        },
    ]
    ```
    """
    return {"document": get_document(request)}
