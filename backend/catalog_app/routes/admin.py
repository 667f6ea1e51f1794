# Overview: Flask API routes for admin login and data refresh.

from flask import Blueprint, request, current_app

from ..decorators import require_admin
from ..extensions import catalog
from ..services import refresh_service
from ..services.auth_service import authenticate_admin
from ..time_utils import to_utc_z
from ..validation import CatalogError

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.post("/login")
def login():
    """
    Exchange the admin password for a bearer token.

    Body: {"password": "..."}
    Returns: {"token": "...", "expiresAt": "...Z"}
    """
    payload = request.get_json(silent=True) or {}
    try:
        authenticate_admin(str(payload.get("password") or ""), catalog.context.admin_password_hash)
    except CatalogError as e:
        current_app.logger.warning("Failed admin login from %s", request.remote_addr)
        return {"error": str(e)}, e.status_code

    token, session = catalog.sessions.create()
    return {"token": token, "expiresAt": to_utc_z(session.expires_at)}


@admin_bp.post("/logout")
@require_admin
def logout():
    auth_header = request.headers.get("Authorization", "")
    revoked = False
    if auth_header.startswith("Bearer "):
        revoked = catalog.sessions.revoke(auth_header.split(" ", 1)[1].strip())
    return {"ok": True, "revoked": revoked}


@admin_bp.get("/refresh-status")
def refresh_status():
    return refresh_service.refresh_status()


@admin_bp.post("/refresh")
@require_admin
def refresh():
    """Query params: type = all (default) | images | inventory | pending | products."""
    try:
        return refresh_service.refresh(request.args.get("type", "all"))
    except CatalogError as e:
        return {"error": str(e)}, e.status_code
    except Exception as e:
        current_app.logger.exception("Failed to refresh catalog data")
        return {"error": str(e)}, 500
