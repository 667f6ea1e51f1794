# Overview: Startup initialization and on-demand reloads of the cached sheets and images.

from __future__ import annotations

from flask import current_app

from ..extensions import catalog
from ..time_utils import to_utc_z, utcnow
from ..validation import RefreshInProgressError, ValidationError
from . import loader_service

REFRESH_TYPES = ("all", "images", "inventory", "pending", "products")


def _run_loaders(refresh_type: str) -> None:
    state = catalog.state
    if refresh_type in ("all", "images"):
        loader_service.load_images()
    if refresh_type in ("all", "inventory"):
        loader_service.load_inventory()
    if refresh_type in ("all", "products"):
        # rebuilds products joined against the current maps
        loader_service.load_catalog()
    else:
        state.rejoin_products()
    if refresh_type in ("all", "pending"):
        loader_service.load_pending()
    if refresh_type == "all":
        state.last_refresh_time = utcnow()


def refresh_status() -> dict:
    state = catalog.state
    return {
        "isRefreshing": state.is_refreshing,
        "lastRefreshTime": to_utc_z(state.last_refresh_time),
        **state.counts(),
    }


def refresh(refresh_type: str | None = "all") -> dict:
    """
    Re-run the loaders for one collection or all of them.

    Raises ValidationError for an unknown type, RefreshInProgressError when
    another refresh is running (no queuing), UpstreamError when the catalog
    sheet cannot be loaded.
    """
    refresh_type = (refresh_type or "all").strip().lower()
    if refresh_type not in REFRESH_TYPES:
        raise ValidationError(
            f"Unknown refresh type: {refresh_type} (expected one of {', '.join(REFRESH_TYPES)})"
        )

    state = catalog.state
    if not state.try_begin_refresh():
        raise RefreshInProgressError("A refresh is already in progress")
    try:
        current_app.logger.info("Refreshing %s", refresh_type)
        _run_loaders(refresh_type)
    finally:
        state.end_refresh()

    return {
        "success": True,
        "type": refresh_type,
        "message": f"Refreshed {refresh_type}",
        **refresh_status(),
    }


def initialize() -> None:
    """
    Initial load at startup: images, inventory, catalog, pending.

    A catalog failure propagates (the service cannot start without it).
    """
    status = refresh("all")
    current_app.logger.info(
        "Catalog ready: %(productsCount)d products, %(imagesCount)d images, "
        "%(inventoryCount)d inventory SKUs, %(pendingCount)d pending",
        status,
    )
