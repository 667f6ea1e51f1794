# Overview: Flask API routes for pending submissions, approvals and CSV bulk upload.

"""
Pending product routes.

- Listing, manual submission, CSV upload and the template are open to staff.
- Approve and reject require an admin credential (@require_admin).
"""
from flask import Blueprint, Response, request, jsonify, current_app

from ..decorators import require_admin
from ..services import import_service, pending_service
from ..validation import CatalogError, ValidationError

pending_bp = Blueprint("pending", __name__, url_prefix="/api")


@pending_bp.get("/products/pending")
def list_pending():
    return jsonify([p.to_dict() for p in pending_service.list_pending()])


@pending_bp.post("/products/pending")
def submit_pending():
    """
    Queue a new product for approval.

    Body: sku, brand, productName (required); category, subCategory, size,
    color, submittedBy (optional).
    """
    payload = request.get_json(silent=True) or {}
    try:
        record = pending_service.submit_pending(payload)
    except CatalogError as e:
        return {"error": str(e)}, e.status_code
    except Exception as e:
        current_app.logger.exception("Failed to submit pending product")
        return {"error": str(e)}, 500

    return {
        "success": True,
        "message": f"{record.sku} was added to the approval queue",
        "product": record.to_dict(),
    }, 201


@pending_bp.post("/products/approve/<path:sku>")
@require_admin
def approve_pending(sku: str):
    try:
        product = pending_service.approve_pending(sku)
    except CatalogError as e:
        return {"error": str(e)}, e.status_code
    except Exception as e:
        current_app.logger.exception("Failed to approve pending product")
        return {"error": str(e)}, 500

    return {
        "success": True,
        "message": f"{product.sku} was approved and added to the catalog",
        "product": product.to_dict(),
    }


@pending_bp.post("/products/reject/<path:sku>")
@require_admin
def reject_pending(sku: str):
    """Body (optional): {"reason": "..."} - logged only."""
    payload = request.get_json(silent=True) or {}
    try:
        record = pending_service.reject_pending(sku, reason=payload.get("reason"))
    except CatalogError as e:
        return {"error": str(e)}, e.status_code
    except Exception as e:
        current_app.logger.exception("Failed to reject pending product")
        return {"error": str(e)}, 500

    return {"success": True, "message": f"{record.sku} was rejected"}


@pending_bp.post("/products/upload")
def upload_products():
    """Multipart field "file": a CSV in the template layout. Returns the import report."""
    file = request.files.get("file")
    try:
        if file is None:
            raise ValidationError("file is required")
        report = import_service.import_csv(file.stream.read())
    except CatalogError as e:
        return {"error": str(e)}, e.status_code
    except Exception as e:
        current_app.logger.exception("Failed to import CSV upload")
        return {"error": str(e)}, 500

    return report


@pending_bp.get("/template/download")
def download_template():
    return Response(
        import_service.template_csv(),
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=product_template.csv"},
    )
