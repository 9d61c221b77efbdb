from pathlib import Path
from typing import Any, Dict, Optional

import django
from django.conf import settings

TESTS_DIR = Path(__file__).resolve().parent

BASE_URL = "https://example.com/"


def setup_test_config(extra_settings: Optional[Dict[str, Any]] = None) -> None:
    if settings.configured:
        return

    default_settings = {
        "BASE_DIR": TESTS_DIR,
        "INSTALLED_APPS": ["django_document"],
        "TEMPLATES": [
            {
                "BACKEND": "django.template.backends.django.DjangoTemplates",
                "DIRS": [],
                "OPTIONS": {
                    "context_processors": [
                        "django.template.context_processors.request",
                        "django_document.context_processors.document",
                    ],
                },
            }
        ],
        "DATABASES": {
            "default": {
                "ENGINE": "django.db.backends.sqlite3",
                "NAME": ":memory:",
            }
        },
        "MIDDLEWARE": ["django_document.middleware.DocumentMiddleware"],
        "SECRET_KEY": "secret",
        "DOCUMENT": {
            "base_url": BASE_URL,
        },
    }

    settings.configure(
        **{
            **default_settings,
            **(extra_settings or {}),
        }
    )

    django.setup()
