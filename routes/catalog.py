"""
Catalog routes.

Handles:
- /api/add-to-collection - Resolve one product for the browser cart
"""

from flask import Blueprint, current_app

from core.exceptions import InvalidRequestError, ProductNotFoundError
from routes.guards import read_json_body, token_required


catalog_bp = Blueprint("catalog", __name__, url_prefix="/api")


def _text_field(body: dict, *names: str) -> str:
    """First string value among ``names``, trimmed; non-strings count as missing."""
    for name in names:
        value = body.get(name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


@catalog_bp.route("/add-to-collection", methods=["POST"])
@token_required
def add_to_collection():
    """
    Look up a product before it goes into the cart.

    The storefront page has always sent the product code as ``productName``;
    ``productCode`` is accepted too.
    """
    body = read_json_body()
    product_code = _text_field(body, "productCode", "productName")
    size = _text_field(body, "size")

    if not product_code or not size:
        raise InvalidRequestError("Product name and size are required")

    catalog = current_app.config["CATALOG_SERVICE"]
    product = catalog.find_product_by_code(product_code)
    if product is None:
        raise ProductNotFoundError(product_code)

    return {"success": True, "product": product.to_dict(), "size": size}, 200
