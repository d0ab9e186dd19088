"""Product aggregate with Variant entities — the stock-holding side of the catalog.

Each product carries an aggregate stock counter; each variant (a colour or
size refinement) carries its own counter and an optional price override.
An order line against a variant draws down both counters, and a
cancellation puts both back.
"""

from protean.fields import Boolean, Float, HasMany, Integer, String

from ordering.domain import ordering
from ordering.errors import Unavailable


@ordering.entity(part_of="Product")
class Variant:
    """A refinement of a product with its own stock and optional price."""

    color = String(required=True, max_length=50)
    color_code = String(max_length=7)
    size = String(max_length=20)
    price = Float(min_value=0.0)
    stock = Integer(default=0, min_value=0)


@ordering.aggregate
class Product:
    name = String(required=True, max_length=255)
    slug = String(max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)
    variants = HasMany(Variant)

    def find_variant(self, variant_id):
        return next((v for v in self.variants if str(v.id) == str(variant_id)), None)

    def unit_price(self, variant=None) -> float:
        """Variant price when the variant defines one, else the base price."""
        if variant is not None and variant.price is not None:
            return variant.price
        return self.price

    def available_stock(self, variant=None) -> int:
        if variant is not None:
            return variant.stock
        return self.stock

    def withdraw_stock(self, quantity, variant_id=None):
        """Take `quantity` units out of stock, only if every counter involved can cover it.

        Both counters are checked before either is touched, so a failure
        leaves the product exactly as it was.
        """
        variant = None
        if variant_id:
            variant = self.find_variant(variant_id)
            if variant is None:
                raise Unavailable(f"Invalid variant for {self.name}", product_id=str(self.id))
            if variant.stock < quantity:
                raise Unavailable(f"Insufficient stock for {self.name}", product_id=str(self.id))

        if self.stock < quantity:
            raise Unavailable(f"Insufficient stock for {self.name}", product_id=str(self.id))

        if variant is not None:
            variant.stock = variant.stock - quantity
        self.stock = self.stock - quantity

    def restore_stock(self, quantity, variant_id=None):
        """Put `quantity` units back, on the variant too when one was ordered."""
        if variant_id:
            variant = self.find_variant(variant_id)
            if variant is not None:
                variant.stock = variant.stock + quantity
        self.stock = self.stock + quantity
