"""Asset cache and icon loading."""

from __future__ import annotations

from collections.abc import Callable

from PIL import Image

from lodestar.assets.cache import AssetCache
from lodestar.assets.icons import IconLoader
from lodestar.config.models import AssetsConfig
from lodestar.index.models import Catalog


def icon_cache(
    catalog_source: Callable[[], Catalog],
    config: AssetsConfig | None = None,
) -> AssetCache[Image.Image]:
    """Icon cache resolving ids against whatever catalog is current."""
    config = config or AssetsConfig()
    loader = IconLoader(size=config.icon_size)
    return AssetCache(
        loader=loader,
        resolve=lambda resource_id: catalog_source().get(resource_id),
        placeholder=loader.placeholder,
        max_workers=config.max_workers,
    )


__all__ = ["AssetCache", "IconLoader", "icon_cache"]
