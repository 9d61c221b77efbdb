"""Ordering of styles and scripts according to their dependencies."""

from collections.abc import Collection, Iterable, Mapping
from typing import TypeVar

from django_document.assets import Asset, Script
from django_document.util.logger import logger, trace_asset_msg

TAsset = TypeVar("TAsset", bound=Asset)


def _is_footer_script(asset: Asset) -> bool:
    return isinstance(asset, Script) and asset.in_footer


def resolve_dependencies(
    definitions: Mapping[str, TAsset],
    added: Iterable[str],
    rendered: Collection[str] = (),
    allow_footer: bool = False,
) -> dict[str, TAsset]:
    """
    Given the handles that were requested, return the assets that should be rendered,
    ordered so that each asset comes after its dependencies.

    **Args:**

    - `definitions` - All registered assets of one kind, by handle.
    - `added` - Requested handles, in the order in which they were requested.
    - `rendered` - Handles that were already rendered. They are treated as satisfied
        and are not returned again.
    - `allow_footer` - If `False`, we're building the `<head>`, and scripts placed in
        the footer are left out.

    Broken configurations never raise:

    - Unknown handles are skipped. Assets that depend on them are still returned.
    - Circular dependencies (including an asset depending on itself) are broken at the
        point where the cycle is detected. Each asset is returned only once.
    - If a head script depends on a footer script, the footer script is moved
        to the head (its `placement` is changed), so it's rendered before its dependant.

    **Example:**

    ```python
    resolve_dependencies(
        {
            "jquery": Script("jquery", src="jquery.js"),
            "app": Script("app", src="app.js", dependencies=["jquery"]),
        },
        added=["app"],
        allow_footer=True,
    )
    # {"jquery": <Script jquery>, "app": <Script app>}
    ```
    """
    result: dict[str, TAsset] = {}

    # Iterative depth-first traversal. We pop from the end, so the handles are pushed
    # in reverse to process them in the order in which they were added.
    stack = list(reversed(list(added)))
    expanded: set[str] = set()

    while stack:
        handle = stack.pop()

        # Already satisfied by another asset, or in an earlier build
        if handle in result or handle in rendered:
            continue

        asset = definitions.get(handle)
        if asset is None:
            logger.debug("Skipping unknown asset '%s'", handle)
            continue

        in_footer = _is_footer_script(asset)

        if not asset.dependencies or handle in expanded:
            # Footer scripts are never rendered in the head. They stay in `added`,
            # so they will be picked up when building the footer.
            if not allow_footer and in_footer:
                trace_asset_msg("SKIP", asset.kind, handle, "footer script while building head")
                continue

            trace_asset_msg("RESOLVE", asset.kind, handle)
            result[handle] = asset
            continue

        # Revisit this asset after all its dependencies were processed.
        # Marking it as expanded *before* the dependencies is what stops cycles.
        stack.append(handle)
        expanded.add(handle)

        # Head scripts force all of their dependencies to go in head before them.
        force_head = not allow_footer and not in_footer

        for dep_handle in asset.dependencies:
            stack.append(dep_handle)

            if force_head:
                dep_asset = definitions.get(dep_handle)
                if dep_asset is not None and _is_footer_script(dep_asset):
                    logger.debug(
                        "Moving script '%s' to head, because head script '%s' depends on it",
                        dep_handle,
                        handle,
                    )
                    dep_asset.set_placement("head")  # type: ignore[attr-defined]
                    # Expanded earlier as a footer script, so its own dependencies
                    # were not promoted. Expand it again as a head script.
                    if dep_handle not in result:
                        expanded.discard(dep_handle)

    return result
