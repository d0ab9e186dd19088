"""Ordering database management CLI.

Creates and drops the ordering schema, and seeds a small demo catalog so the
checkout flow can be exercised by hand or by the load tests.

Usage:
    python src/manage.py setup-db    # Create all tables
    python src/manage.py drop-db     # Drop all tables
    python src/manage.py seed-demo   # Products, an address and coupons for a demo user
"""

import argparse
import sys
from datetime import UTC, datetime, timedelta


def setup_databases():
    from ordering.domain import ordering
    from ordering.utils.db import setup_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Creating ordering database schema...")
    setup_db(ordering)
    print("Done.")


def drop_databases():
    from ordering.domain import ordering
    from ordering.utils.db import drop_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Dropping ordering database schema...")
    drop_db(ordering)
    print("Done.")


def seed_demo(user_id: str, stock: int):
    """Insert a demo catalog, one address for `user_id`, and two coupons."""
    from ordering.address.address import Address
    from ordering.catalogue.product import Product, Variant
    from ordering.coupon.coupon import Coupon, DiscountType
    from ordering.domain import ordering

    ordering.init()
    now = datetime.now(UTC)

    with ordering.domain_context():
        products = [
            Product(name="Aviator Classic", slug="aviator-classic", price=1000.0, stock=stock),
            Product(name="Round Reader", slug="round-reader", price=500.0, stock=stock),
            Product(
                name="Wayfarer",
                slug="wayfarer",
                price=1500.0,
                stock=stock * 2,
                variants=[
                    Variant(color="Black", color_code="#000000", stock=stock),
                    Variant(color="Tortoise", color_code="#8B4513", price=1750.0, stock=stock),
                ],
            ),
        ]
        product_repo = ordering.repository_for(Product)
        for product in products:
            product_repo.add(product)

        address = Address(
            user_id=user_id,
            name="Demo Customer",
            phone="9999999999",
            street="221B Baker Street",
            city="Mumbai",
            state="Maharashtra",
            pincode="400001",
        )
        ordering.repository_for(Address).add(address)

        coupon_repo = ordering.repository_for(Coupon)
        coupon_repo.add(
            Coupon.create(
                code="FIRST10",
                discount_type=DiscountType.PERCENTAGE.value,
                discount_value=10,
                start_date=now - timedelta(days=1),
                end_date=now + timedelta(days=365),
            )
        )
        coupon_repo.add(
            Coupon.create(
                code="FLAT200",
                discount_type=DiscountType.FIXED.value,
                discount_value=200,
                min_purchase=1500,
                usage_limit=100,
                start_date=now - timedelta(days=1),
                end_date=now + timedelta(days=30),
            )
        )

    print(f"Address: {address.id}")
    for product in products:
        variants = ", ".join(f"{v.color}={v.id}" for v in product.variants)
        print(f"Product {product.name}: {product.id}" + (f" ({variants})" if variants else ""))
    print("Coupons: FIRST10, FLAT200")


def main():
    parser = argparse.ArgumentParser(description="Ordering database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    seed_parser = subparsers.add_parser("seed-demo", help="Seed a demo catalog, address and coupons")
    seed_parser.add_argument("--user-id", default="demo-user", help="Owner of the seeded address")
    seed_parser.add_argument("--stock", type=int, default=50, help="Stock per product and variant")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    elif args.command == "seed-demo":
        seed_demo(args.user_id, args.stock)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
