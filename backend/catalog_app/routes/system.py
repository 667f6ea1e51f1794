# backend/catalog_app/routes/system.py
"""
System health endpoint.

Reports what is currently cached; it does not call Google.
"""

from flask import Blueprint

from ..extensions import catalog
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200 "ok" when the catalog is loaded
    - 503 "unhealthy" when the product cache is empty
    """
    state = catalog.state
    counts = state.counts()
    status = "ok" if counts["productsCount"] > 0 else "unhealthy"

    return {
        "status": status,
        "timestamp": to_utc_z(utcnow()),
        "productsLoaded": counts["productsCount"],
        "imagesLoaded": counts["imagesCount"],
        "inventoryLoaded": counts["inventoryCount"],
        "pendingCount": counts["pendingCount"],
        "lastRefreshTime": to_utc_z(state.last_refresh_time),
        "isRefreshing": state.is_refreshing,
    }, (200 if status == "ok" else 503)
