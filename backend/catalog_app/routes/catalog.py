# Overview: Flask API routes for catalog lookups; parses query input and returns JSON responses.

"""
Catalog lookup routes.

All reads are scans over the in-memory product cache; nothing here calls
Google.
"""
from flask import Blueprint, request, jsonify

from ..services import catalog_service
from ..validation import CatalogError

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api")


@catalog_bp.get("/brands")
def list_brands():
    return jsonify(catalog_service.list_brands())


@catalog_bp.get("/categories")
def list_categories():
    return jsonify(catalog_service.list_categories())


@catalog_bp.get("/subcategories")
def list_subcategories():
    """Query params: category (optional) - only sub-categories used in this category."""
    return jsonify(catalog_service.list_subcategories(request.args.get("category")))


@catalog_bp.get("/products")
def search_products():
    """
    Search the cached catalog.

    Query params (all optional, combined with AND):
    - brand: exact brand
    - category: exact category
    - subCategory: exact sub-category
    - q: case-insensitive text matched against SKU, name, category, sub-category
    """
    products = catalog_service.search_products(
        brand=request.args.get("brand"),
        category=request.args.get("category"),
        sub_category=request.args.get("subCategory"),
        q=request.args.get("q"),
    )
    return jsonify([p.to_dict() for p in products])


@catalog_bp.post("/products/bulk")
def bulk_lookup():
    """Body: {"skus": [...]} - case-insensitive exact SKU match."""
    payload = request.get_json(silent=True) or {}
    try:
        products = catalog_service.bulk_lookup(payload.get("skus"))
    except CatalogError as e:
        return {"error": str(e)}, e.status_code
    return jsonify([p.to_dict() for p in products])


@catalog_bp.get("/check-sku/<path:sku>")
def check_sku(sku: str):
    """Whether a SKU is already taken, and by which sheet."""
    return catalog_service.check_sku(sku)
