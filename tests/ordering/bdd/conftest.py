"""Shared BDD fixtures and step definitions for ordering."""

import pytest
from ordering.catalogue.product import Product
from ordering.coupon.coupon import Coupon, find_coupon
from ordering.errors import OrderingError
from ordering.order.order import Order
from ordering.order.service import cancel_order, change_order_status, place_order, settle_paid_order
from protean import current_domain
from pytest_bdd import given, parsers, then, when

# Admin path an order takes from PENDING to each status
_PATH = {
    "CONFIRMED": ["CONFIRMED"],
    "PROCESSING": ["CONFIRMED", "PROCESSING"],
    "SHIPPED": ["CONFIRMED", "PROCESSING", "SHIPPED"],
    "DELIVERED": ["CONFIRMED", "PROCESSING", "SHIPPED", "DELIVERED"],
}


@pytest.fixture()
def checkout():
    """Mutable scenario state: products by name, the address, the order and any rejection."""
    return {"products": {}, "address": None, "user_id": None, "order": None, "error": None}


def _attempt(checkout, action, *args, **kwargs):
    try:
        checkout["order"] = action(*args, **kwargs)
    except OrderingError as exc:
        checkout["error"] = exc


def _current_order(checkout) -> Order:
    return current_domain.repository_for(Order).get(checkout["order"].id)


def _product(checkout, name) -> Product:
    return current_domain.repository_for(Product).get(checkout["products"][name].id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the customer "{user_id}" has a delivery address'))
def _(checkout, seed_address, user_id):
    checkout["user_id"] = user_id
    checkout["address"] = seed_address(user_id=user_id)


@given(parsers.cfparse('a product "{name}" priced {price:d} with {stock:d} in stock'))
def _(checkout, seed_product, name, price, stock):
    checkout["products"][name] = seed_product(name=name, price=float(price), stock=stock)


@given(parsers.cfparse('a {percent:d} percent coupon "{code}"'))
def _(seed_coupon, percent, code):
    seed_coupon(code=code, discount_type="PERCENTAGE", discount_value=percent)


@given(parsers.cfparse('the customer has ordered {first:d} of "{first_name}" and {second:d} of "{second_name}"'))
def _(checkout, first, first_name, second, second_name):
    checkout["order"] = place_order(
        checkout["user_id"],
        checkout["address"].id,
        "COD",
        [
            {"product_id": checkout["products"][first_name].id, "quantity": first},
            {"product_id": checkout["products"][second_name].id, "quantity": second},
        ],
    )


@given(parsers.cfparse('the order has moved to "{status}"'))
def _(checkout, status):
    for step in _PATH[status]:
        change_order_status(checkout["order"].id, step)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the customer orders {quantity:d} of "{name}" with cash on delivery'))
def _(checkout, quantity, name):
    items = [{"product_id": checkout["products"][name].id, "quantity": quantity}]
    _attempt(checkout, place_order, checkout["user_id"], checkout["address"].id, "COD", items)


@when(parsers.cfparse('the customer orders {quantity:d} of "{name}" with coupon "{code}"'))
def _(checkout, quantity, name, code):
    items = [{"product_id": checkout["products"][name].id, "quantity": quantity}]
    _attempt(
        checkout, place_order, checkout["user_id"], checkout["address"].id, "COD", items, coupon_code=code
    )


@when(parsers.cfparse('the customer settles {quantity:d} of "{name}" with a {kind} signature'))
def _(checkout, sign, quantity, name, kind):
    signature = sign("order_BDD1", "pay_BDD1")
    if kind == "forged":
        signature = signature[::-1]
    items = [{"product_id": checkout["products"][name].id, "quantity": quantity}]
    _attempt(
        checkout,
        settle_paid_order,
        checkout["user_id"],
        "order_BDD1",
        "pay_BDD1",
        signature,
        checkout["address"].id,
        items,
    )


@when("the customer cancels the order")
def _(checkout):
    order_id = checkout["order"].id
    try:
        cancel_order(checkout["user_id"], order_id)
    except OrderingError as exc:
        checkout["error"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order subtotal is {amount:d}"))
def _(checkout, amount):
    assert _current_order(checkout).subtotal == amount


@then(parsers.cfparse("the order discount is {amount:d}"))
def _(checkout, amount):
    assert _current_order(checkout).discount == amount


@then(parsers.cfparse("the shipping charge is {amount:d}"))
def _(checkout, amount):
    assert _current_order(checkout).shipping_charge == amount


@then(parsers.cfparse("the order total is {amount:d}"))
def _(checkout, amount):
    assert _current_order(checkout).total == amount


@then(parsers.cfparse('the order status is "{status}"'))
def _(checkout, status):
    assert _current_order(checkout).status == status


@then(parsers.cfparse('the payment status is "{status}"'))
def _(checkout, status):
    assert _current_order(checkout).payment_status == status


@then(parsers.cfparse('the latest tracking entry is "{label}"'))
def _(checkout, label):
    assert _current_order(checkout).timeline(newest_first=True)[0].status == label


@then(parsers.cfparse("the order has {count:d} tracking entries"))
def _(checkout, count):
    assert len(_current_order(checkout).tracking) == count


@then(parsers.cfparse('the order is rejected with "{message}"'))
def _(checkout, message):
    assert checkout["error"] is not None
    assert checkout["error"].message == message


@then("no order has been stored")
def _():
    assert current_domain.repository_for(Order)._dao.query.all().total == 0


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(checkout, name, stock):
    assert _product(checkout, name).stock == stock


@then(parsers.re(r'coupon "(?P<code>[^"]+)" has been used (?P<count>\d+) times?'), converters={"count": int})
def _(code, count):
    coupon = find_coupon(code)
    assert coupon is not None
    assert current_domain.repository_for(Coupon).get(coupon.id).used_count == count
