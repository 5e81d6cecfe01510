import logging
from typing import List, Optional

from shoptube import queries
from shoptube.graphql_client import GraphQLClient, is_uuid

logger = logging.getLogger(__name__)

# Fulfilment moves a seller may make once payment has been verified.
SELLER_TRANSITIONS = {
    "pending": {"shipped", "cancelled"},
    "shipped": {"delivered"},
}


class OrderTransitionError(Exception):
    pass


def get_customer_order(client: GraphQLClient, order_id: str, customer_id: str) -> Optional[dict]:
    """Return the order only if it belongs to ``customer_id``."""
    if not is_uuid(order_id):
        return None
    orders = client.execute(queries.GET_ORDER_BY_ID, {"orderId": order_id, "userId": customer_id})["orders"]
    return orders[0] if orders else None


def users_by_id(client: GraphQLClient, ids) -> dict:
    ids = sorted({i for i in ids if i})
    if not ids:
        return {}
    return {u["id"]: u for u in client.execute(queries.GET_USERS_BY_IDS, {"ids": ids})["users"]}


def list_customer_orders(client: GraphQLClient, customer_id: str) -> List[dict]:
    orders = client.execute(queries.GET_USER_ORDERS, {"userId": customer_id})["orders"]
    sellers = users_by_id(
        client,
        ((item.get("product") or {}).get("seller_id") for order in orders for item in order["order_items"]),
    )
    for order in orders:
        for item in order["order_items"]:
            product = item.get("product")
            if product:
                product["seller"] = sellers.get(product.get("seller_id"))
    return orders


def update_seller_order_status(client: GraphQLClient, order_id: str, seller_id: str, status: str) -> dict:
    if not is_uuid(order_id):
        raise LookupError(order_id)
    orders = client.execute(queries.GET_SELLER_ORDER, {"orderId": order_id, "sellerId": seller_id})["orders"]
    if not orders:
        raise LookupError(order_id)
    current = orders[0]["status"]
    if status not in SELLER_TRANSITIONS.get(current, set()):
        raise OrderTransitionError(f"Cannot move order from {current} to {status}")

    affected = client.execute(
        queries.UPDATE_ORDER_STATUS_BY_ID,
        {"orderId": order_id, "fromStatus": current, "status": status},
    )["update_orders"]["affected_rows"]
    if not affected:
        raise OrderTransitionError("Order status changed concurrently, reload and retry")
    logger.info("Order %s moved %s -> %s by seller %s", order_id, current, status, seller_id)
    return {"id": order_id, "status": status}
