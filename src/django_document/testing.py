import inspect
from functools import wraps
from typing import Any, Callable, Dict, Optional, TypeVar, Union, overload

from django.conf import settings
from django.test import override_settings

T = TypeVar("T", bound=Union[Callable, type])


@overload
def document_test(_fn: T) -> T: ...


@overload
def document_test(
    *,
    django_settings: Optional[Dict[str, Any]] = None,
    document_settings: Optional[Dict[str, Any]] = None,
) -> Callable[[T], T]: ...


def document_test(
    _fn: Optional[T] = None,
    *,
    django_settings: Optional[Dict[str, Any]] = None,
    document_settings: Optional[Dict[str, Any]] = None,
) -> Union[T, Callable[[T], T]]:
    """
    Decorator for testing code that uses django_document.

    Applies the given settings for the duration of each test. When applied to a class,
    each `test_*` method is decorated.

    **Args:**

    - `django_settings` - Django settings to override, e.g. `{"STATIC_ROOT": "/srv/static"}`.
    - `document_settings` - Keys of `settings.DOCUMENT` to override. They are merged
        onto the current `DOCUMENT` settings.

    **Example:**

    ```python
    from django_document import Document
    from django_document.testing import document_test

    @document_test(document_settings={"base_url": "https://cdn.example.com/"})
    def test_cdn_url():
        document = Document()
        document.register_script("app", "app.js").add_scripts("app")
        assert 'src="https://cdn.example.com/app.js"' in document.render_footer()
    ```
    """

    def decorator(obj: T) -> T:
        if isinstance(obj, type):
            for name, member in list(vars(obj).items()):
                if name.startswith("test") and callable(member):
                    setattr(obj, name, decorator(member))  # type: ignore[arg-type]
            return obj

        fn: Callable = obj

        def get_overrides() -> Dict[str, Any]:
            overrides = dict(django_settings or {})
            if document_settings is not None:
                current = overrides.get("DOCUMENT", getattr(settings, "DOCUMENT", None)) or {}
                overrides["DOCUMENT"] = {**current, **document_settings}
            return overrides

        if inspect.iscoroutinefunction(fn):

            @wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with override_settings(**get_overrides()):
                    return await fn(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with override_settings(**get_overrides()):
                return fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    if _fn is None:
        return decorator
    return decorator(_fn)
