from collections.abc import Iterable, KeysView
from typing import Generic, TypeVar, overload

from django_document.assets import Asset
from django_document.util.logger import logger
from django_document.util.misc import normalize_handles

TAsset = TypeVar("TAsset", bound=Asset)


class AssetRegistry(Generic[TAsset]):
    """
    Definitions of all styles (or all scripts) of a document, and which of them
    were requested ("added") and already emitted ("rendered").

    While `locked` is set, `register()`, `add()` and `remove()` do nothing.
    The `Document` locks its registries for the duration
    of a build, so that preparation callbacks cannot change the assets that are
    being resolved.
    """

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.locked = False
        self._definitions: dict[str, TAsset] = {}
        # dicts instead of sets to keep insertion order
        self._added: dict[str, None] = {}
        self._rendered: dict[str, None] = {}

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} kind={self.kind!r} registered={len(self._definitions)}"
            f" added={len(self._added)} rendered={len(self._rendered)}>"
        )

    def _is_ignored(self, action: str, handles: Iterable[str]) -> bool:
        if self.locked:
            logger.debug(
                "Ignoring %s of %s %s, assets cannot change while the document is being built",
                action,
                self.kind,
                ", ".join(repr(handle) for handle in handles),
            )
        return self.locked

    @property
    def definitions(self) -> dict[str, TAsset]:
        return self._definitions

    @property
    def added(self) -> KeysView[str]:
        return self._added.keys()

    @property
    def rendered(self) -> KeysView[str]:
        return self._rendered.keys()

    def register(self, asset: TAsset) -> None:
        """Add a definition, or overwrite the one with the same handle."""
        if self._is_ignored("registration", [asset.handle]):
            return
        self._definitions[asset.handle] = asset

    def add(self, *handles: str, force: bool = False) -> None:
        """
        Request assets to be rendered in the document.

        `force` bypasses the lock. It's used by the document itself while building.
        """
        if not force and self._is_ignored("adding", handles):
            return
        for handle in normalize_handles(handles):
            self._added[handle] = None

    def remove(self, *handles: str) -> None:
        """
        Undo `add()`. The definitions stay registered, and the assets are still
        rendered if other added assets depend on them.
        """
        if self._is_ignored("removal", handles):
            return
        for handle in normalize_handles(handles):
            self._added.pop(handle, None)

    @overload
    def get(self, handle: str) -> TAsset | None: ...

    @overload
    def get(self, handle: None = None) -> dict[str, TAsset]: ...

    def get(self, handle: str | None = None) -> TAsset | dict[str, TAsset] | None:
        if handle is None:
            return self.get_all()
        return self._definitions.get(handle.strip())

    def get_all(self) -> dict[str, TAsset]:
        return dict(self._definitions)

    def is_added(self, handle: str) -> bool:
        return handle.strip() in self._added

    def get_added(self) -> list[str]:
        return list(self._added)

    def get_rendered(self) -> list[str]:
        return list(self._rendered)

    def is_rendered(self, handle: str) -> bool:
        return handle.strip() in self._rendered

    def mark_rendered(self, handle: str) -> None:
        self._rendered[handle] = None
