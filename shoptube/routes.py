import logging
from typing import Optional

from fastapi import APIRouter, Depends

from shoptube.auth import CurrentUser, require_customer
from shoptube.checkout import CheckoutError, initiate_checkout, validate_checkout, verify_payment
from shoptube.config import get_settings
from shoptube.graphql_client import GraphQLClient, get_graphql_client
from shoptube.models import CheckoutRequest
from shoptube.orders import get_customer_order
from shoptube.responses import fail

logger = logging.getLogger(__name__)

router = APIRouter()


def _checkout_failure(e: CheckoutError):
    extra = {"order_id": e.order_id} if e.order_id else {}
    return fail(e.message, e.status_code, **extra)


@router.post("/api/chapa")
def create_checkout(
    request: CheckoutRequest,
    user: CurrentUser = Depends(require_customer),
    client: GraphQLClient = Depends(get_graphql_client),
):
    try:
        order = validate_checkout(request)
    except CheckoutError as e:
        logger.info("Checkout rejected for user %s: %s", user.id, e.message)
        return _checkout_failure(e)
    if order.customer_id != user.id:
        return fail("Unauthorized", 403)

    try:
        return initiate_checkout(client, order, get_settings())
    except CheckoutError as e:
        return _checkout_failure(e)
    except Exception:
        logger.exception("Checkout initialization crashed for user %s", user.id)
        return fail("Server error during Chapa init", 500)


@router.get("/api/chapa/verify/{tx_ref}")
def verify_checkout(tx_ref: str, client: GraphQLClient = Depends(get_graphql_client)):
    try:
        result = verify_payment(client, tx_ref, get_settings())
    except CheckoutError as e:
        return _checkout_failure(e)
    except Exception:
        logger.exception("Verification error for tx_ref=%s", tx_ref)
        return fail("Internal server error.", 500)
    return result


@router.get("/api/orders/{order_id}")
def get_order(
    order_id: str,
    user_id: Optional[str] = None,
    user: CurrentUser = Depends(require_customer),
    client: GraphQLClient = Depends(get_graphql_client),
):
    if user_id and user_id != user.id:
        return fail("Unauthorized", 403)
    order = get_customer_order(client, order_id, user.id)
    if order is None:
        return fail("Order not found", 404)
    return {"success": True, "order": order}


@router.get("/customer/order-confirmation")
def order_confirmation(
    tx_ref: Optional[str] = None,
    order_id: Optional[str] = None,
    user: CurrentUser = Depends(require_customer),
    client: GraphQLClient = Depends(get_graphql_client),
):
    if not order_id:
        if not tx_ref:
            return fail("Order ID or tx_ref is required", 400)
        try:
            order_id = verify_payment(client, tx_ref, get_settings())["order_id"]
        except CheckoutError as e:
            return _checkout_failure(e)

    order = get_customer_order(client, order_id, user.id)
    if order is None:
        return fail("Order not found", 404)
    return {"success": True, "order": order}
