"""Order intake validation.

Reads the delivery address and the requested products, and checks them
against the requester and the current stock. Nothing is mutated here: stock
and coupon usage only change in the commit, which re-checks both.
"""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.address.address import Address
from ordering.catalogue.product import Product
from ordering.errors import InvalidAddress, InvalidRequest, Unavailable


@dataclass(frozen=True)
class ResolvedLine:
    """A requested line matched to its product, with the unit price captured now."""

    product_id: str
    variant_id: str | None
    product_name: str
    unit_price: float
    quantity: int


def parse_lines(items) -> list[dict]:
    """Normalise requested items to dicts with product_id, variant_id and quantity."""
    if not items:
        raise InvalidRequest("Cart is empty")

    lines = []
    for item in items:
        product_id = item.get("product_id")
        quantity = item.get("quantity")
        if not product_id or not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise InvalidRequest("Invalid order data")
        lines.append(
            {
                "product_id": str(product_id),
                "variant_id": str(item["variant_id"]) if item.get("variant_id") else None,
                "quantity": quantity,
            }
        )
    return lines


def verify_address(user_id, address_id) -> Address:
    try:
        address = current_domain.repository_for(Address).get(address_id)
    except ObjectNotFoundError:
        raise InvalidAddress("Invalid address", address_id=str(address_id)) from None

    if not address.is_owned_by(user_id):
        raise InvalidAddress("Invalid address", address_id=str(address_id))
    return address


def load_active_products(product_ids) -> dict[str, Product]:
    """Fetch every distinct product id, failing when any is missing or inactive."""
    repo = current_domain.repository_for(Product)
    products = {}
    for product_id in product_ids:
        try:
            product = repo.get(product_id)
        except ObjectNotFoundError:
            continue
        if product.is_active:
            products[product_id] = product

    if len(products) != len(product_ids):
        missing = sorted(set(product_ids) - set(products))
        raise Unavailable("Some products are unavailable", product_ids=missing)
    return products


def validate_intake(user_id, address_id, items) -> list[ResolvedLine]:
    """Check an order request and resolve its lines.

    Raises:
        InvalidRequest: the cart is empty or a line is malformed.
        InvalidAddress: the address is unknown or belongs to someone else.
        Unavailable: a product is missing or inactive, a variant is unknown,
            or a line asks for more than is in stock.
    """
    lines = parse_lines(items)
    verify_address(user_id, address_id)

    product_ids = list(dict.fromkeys(line["product_id"] for line in lines))
    products = load_active_products(product_ids)

    resolved = []
    for line in lines:
        product = products[line["product_id"]]
        variant = None
        if line["variant_id"]:
            variant = product.find_variant(line["variant_id"])
            if variant is None:
                raise Unavailable(f"Invalid variant for {product.name}", product_id=str(product.id))

        if product.available_stock(variant) < line["quantity"]:
            raise Unavailable(f"Insufficient stock for {product.name}", product_id=str(product.id))

        resolved.append(
            ResolvedLine(
                product_id=str(product.id),
                variant_id=str(variant.id) if variant is not None else None,
                product_name=product.name,
                unit_price=product.unit_price(variant),
                quantity=line["quantity"],
            )
        )
    return resolved
