from django.apps import AppConfig


class DocumentConfig(AppConfig):
    name = "django_document"
    verbose_name = "Document"
