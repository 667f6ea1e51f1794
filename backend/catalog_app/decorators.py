# Overview: Request decorators for admin-only API routes.

from functools import wraps
from flask import request, jsonify, current_app

from .extensions import catalog
from .services.auth_service import verify_password

ADMIN_PASSWORD_HEADER = "x-admin-password"


def admin_credential_valid() -> bool:
    """
    True when the request carries a valid admin credential:
    - Authorization: Bearer <token> issued by /api/admin/login, or
    - x-admin-password: <password> matching the configured bcrypt hash
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return catalog.sessions.validate(auth_header.split(" ", 1)[1].strip())

    password = request.headers.get(ADMIN_PASSWORD_HEADER)
    if password:
        return verify_password(password, catalog.context.admin_password_hash)

    return False


def require_admin(f):
    """Return 401 unless the request carries a valid admin credential."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not catalog.context.admin_password_hash:
            current_app.logger.warning("Admin request to %s but no admin password is configured", request.path)
            return jsonify({"error": "Admin access is not configured"}), 401

        if not admin_credential_valid():
            current_app.logger.warning("Rejected admin request to %s from %s", request.path, request.remote_addr)
            return jsonify({"error": "Admin authentication required"}), 401

        return f(*args, **kwargs)

    return decorated_function
