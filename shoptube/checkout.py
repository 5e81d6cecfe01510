"""Checkout initiation and payment verification.

An order is written in ``payment_pending`` before the gateway is contacted and
``tx_ref`` is used purely as the key to finalise it. The verifier only moves an
order out of ``payment_pending`` through a conditional update, so replays and
concurrent callbacks for one token perform at most one transition.
"""

import json
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from pydantic import ValidationError

from shoptube import queries
from shoptube.chapa_service import ChapaError, generate_tx_ref, initialize_transaction, verify_transaction
from shoptube.config import Settings
from shoptube.graphql_client import GraphQLClient, GraphQLError
from shoptube.models import CheckoutLine, CheckoutRequest

logger = logging.getLogger(__name__)

PAYMENT_PENDING = "payment_pending"
PENDING = "pending"
FAILED = "failed"

CENT = Decimal("0.01")
DEFAULT_PHONE = "0910000000"
INVALID_REQUEST = "Missing or invalid request data"
VERIFICATION_FAILED = "Payment verification failed."


class CheckoutError(Exception):
    def __init__(self, message: str, status_code: int = 400, order_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.order_id = order_id


@dataclass
class CheckoutOrder:
    customer_id: str
    full_name: str
    email: str
    phone_number: str
    total_amount: Decimal
    address: str
    lines: List[CheckoutLine]


def _to_amount(value) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            return None
        # quantize traps once the result exceeds the context precision
        return amount.quantize(CENT)
    except InvalidOperation:
        return None


def validate_checkout(req: CheckoutRequest) -> CheckoutOrder:
    """Reject incomplete or inconsistent checkout forms. Makes no outbound call."""
    total = _to_amount(req.total_amount)
    if not req.user_id or total is None or total <= 0 or not req.address:
        raise CheckoutError(INVALID_REQUEST)
    if not isinstance(req.cart_items, list) or not req.cart_items:
        raise CheckoutError(INVALID_REQUEST)

    lines = []
    for item in req.cart_items:
        if not isinstance(item, dict):
            raise CheckoutError(INVALID_REQUEST)
        try:
            line = CheckoutLine(**item)
        except ValidationError:
            raise CheckoutError(INVALID_REQUEST)
        if not line.product_id or line.quantity < 1 or line.price_per_unit < 0:
            raise CheckoutError(INVALID_REQUEST)
        if _to_amount(line.price_per_unit) is None:
            raise CheckoutError(INVALID_REQUEST)
        lines.append(line)

    computed = _to_amount(sum((line.price_per_unit * line.quantity for line in lines), Decimal("0")))
    if computed is None:
        raise CheckoutError(INVALID_REQUEST)
    if computed != total:
        raise CheckoutError("Cart total does not match line items")

    address = req.address if isinstance(req.address, str) else json.dumps(req.address)
    return CheckoutOrder(
        customer_id=str(req.user_id),
        full_name=(req.full_name or "").strip(),
        email=req.email,
        phone_number=req.phone_number or DEFAULT_PHONE,
        total_amount=total,
        address=address,
        lines=lines,
    )


def check_against_catalog(client: GraphQLClient, order: CheckoutOrder) -> None:
    """Compare the cart snapshot with live product price and stock."""
    ids = sorted({line.product_id for line in order.lines})
    products = {p["id"]: p for p in client.execute(queries.GET_PRODUCTS_BY_IDS, {"ids": ids})["products"]}
    wanted = {}
    for line in order.lines:
        product = products.get(line.product_id)
        if product is None:
            raise CheckoutError(f"Product {line.product_id} is no longer available")
        if _to_amount(product["price"]) != _to_amount(line.price_per_unit):
            raise CheckoutError(f"Price of {product['name']} has changed, please review your cart")
        wanted[line.product_id] = wanted.get(line.product_id, 0) + line.quantity
    for product_id, quantity in wanted.items():
        stock = products[product_id].get("stock")
        if stock is not None and quantity > int(stock):
            raise CheckoutError(f"Insufficient stock for {products[product_id]['name']}")


def build_payment_payload(order: CheckoutOrder, tx_ref: str, settings: Settings) -> dict:
    names = order.full_name.split()
    return {
        "amount": str(order.total_amount),
        "currency": settings.currency,
        "email": order.email,
        "first_name": names[0] if names else "-",
        "last_name": " ".join(names[1:]) or "-",
        "phone_number": order.phone_number,
        "tx_ref": tx_ref,
        "callback_url": settings.callback_url(tx_ref),
        "return_url": settings.return_url(tx_ref),
        "customization": {
            "title": f"{settings.site_name} Payment",
            "description": "Pay for your order",
        },
        "meta": {
            "user_id": order.customer_id,
            "shipping_address": order.address,
            "order_items_json": json.dumps([
                {"product_id": line.product_id, "quantity": line.quantity, "price": str(line.price_per_unit)}
                for line in order.lines
            ]),
        },
    }


def _transition(client: GraphQLClient, tx_ref: str, status: str) -> int:
    data = client.execute(
        queries.UPDATE_ORDER_STATUS_BY_TX_REF,
        {"txRef": tx_ref, "fromStatus": PAYMENT_PENDING, "status": status},
    )
    return data["update_orders"]["affected_rows"]


def find_order_by_tx_ref(client: GraphQLClient, tx_ref: str) -> Optional[dict]:
    orders = client.execute(queries.GET_ORDER_BY_TX_REF, {"txRef": tx_ref})["orders"]
    return orders[0] if orders else None


def initiate_checkout(client: GraphQLClient, order: CheckoutOrder, settings: Settings) -> dict:
    check_against_catalog(client, order)

    tx_ref = generate_tx_ref()
    created = client.execute(queries.CREATE_ORDER, {
        "userId": order.customer_id,
        "totalAmount": str(order.total_amount),
        "status": PAYMENT_PENDING,
        "shippingAddress": order.address,
        "txRef": tx_ref,
        "orderItems": [
            {"product_id": line.product_id, "quantity": line.quantity,
             "price_per_unit": str(line.price_per_unit)}
            for line in order.lines
        ],
    })["insert_orders_one"]
    order_id = created["id"]
    logger.info("Order %s created for tx_ref=%s total=%s", order_id, tx_ref, order.total_amount)

    try:
        checkout_url = initialize_transaction(build_payment_payload(order, tx_ref, settings))
    except ChapaError as e:
        try:
            _transition(client, tx_ref, FAILED)
        except GraphQLError:
            logger.exception("Could not mark order %s failed after gateway error", order_id)
        raise CheckoutError(str(e), status_code=502, order_id=order_id)

    return {"success": True, "checkout_url": checkout_url, "tx_ref": tx_ref, "order_id": order_id}


def _settled(order: dict) -> dict:
    if order["status"] == FAILED:
        raise CheckoutError(VERIFICATION_FAILED, order_id=order["id"])
    return {"success": True, "message": "Payment already verified.", "order_id": order["id"]}


def _matches_order(order: dict, data: dict, settings: Settings) -> bool:
    """The gateway must report the stored amount and the configured currency."""
    reported = _to_amount(data.get("amount"))
    if reported is None or reported != _to_amount(order["total_amount"]):
        return False
    currency = data.get("currency")
    return bool(currency) and str(currency).upper() == settings.currency


def verify_payment(client: GraphQLClient, tx_ref: str, settings: Settings) -> dict:
    order = find_order_by_tx_ref(client, tx_ref)
    if order is None:
        raise CheckoutError("Order not found", status_code=404)
    if order["status"] != PAYMENT_PENDING:
        return _settled(order)

    try:
        result = verify_transaction(tx_ref)
    except ChapaError:
        raise CheckoutError("Payment gateway unavailable", status_code=502, order_id=order["id"])

    data = result.get("data") or {}
    if result.get("status") != "success" or data.get("status") != "success" \
            or not _matches_order(order, data, settings):
        _transition(client, tx_ref, FAILED)
        logger.warning("Payment verification failed for tx_ref=%s order=%s", tx_ref, order["id"])
        raise CheckoutError(VERIFICATION_FAILED, order_id=order["id"])

    if not _transition(client, tx_ref, PENDING):
        # another callback finalised the order first
        return _settled(find_order_by_tx_ref(client, tx_ref))

    logger.info("Payment verified for tx_ref=%s order=%s", tx_ref, order["id"])
    return {"success": True, "message": "Payment verified and order updated.", "order_id": order["id"]}
