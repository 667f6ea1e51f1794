# Overview: Image proxy route streaming Drive files by SKU.

from flask import Blueprint, Response, current_app

from ..extensions import catalog
from ..validation import UpstreamError

images_bp = Blueprint("images", __name__, url_prefix="/api/images")

MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}
DEFAULT_MIME_TYPE = "image/jpeg"
CACHE_CONTROL = "public, max-age=86400"


@images_bp.get("/<path:sku>")
def get_image(sku: str):
    entry = catalog.state.image_map.get(sku)
    if entry is None:
        return {"error": "Image not found"}, 404

    try:
        data = catalog.gateway.download_file(entry.file_id)
    except UpstreamError as e:
        current_app.logger.error("Image download failed for %s: %s", sku, e)
        return {"error": str(e)}, e.status_code

    response = Response(data, mimetype=MIME_TYPES.get(entry.extension, DEFAULT_MIME_TYPE))
    response.headers["Cache-Control"] = CACHE_CONTROL
    return response
