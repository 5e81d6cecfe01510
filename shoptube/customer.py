import logging

from fastapi import APIRouter, Depends, Query

from shoptube import queries
from shoptube.auth import CurrentUser, require_customer
from shoptube.graphql_client import GraphQLClient, get_graphql_client
from shoptube.models import CartItemCreate, CartItemUpdate, WishlistItemCreate
from shoptube.orders import list_customer_orders, users_by_id
from shoptube.responses import fail

logger = logging.getLogger(__name__)

router = APIRouter()


# Cart

@router.get("/api/cart")
def get_cart(user: CurrentUser = Depends(require_customer), client: GraphQLClient = Depends(get_graphql_client)):
    items = client.execute(queries.GET_USER_CART, {"userId": user.id})["cart_items"]
    return {"success": True, "cart_items": items}


@router.post("/api/cart")
def add_to_cart(
    item: CartItemCreate,
    user: CurrentUser = Depends(require_customer),
    client: GraphQLClient = Depends(get_graphql_client),
):
    product = client.execute(queries.GET_PRODUCT_BY_ID, {"productId": item.product_id})["products_by_pk"]
    if not product:
        return fail("Product not found", 404)
    if product.get("stock") is not None and item.quantity > int(product["stock"]):
        return fail("Insufficient stock", 400)

    created = client.execute(queries.ADD_TO_CART, {
        "userId": user.id, "productId": item.product_id, "quantity": item.quantity,
    })["insert_cart_items_one"]
    return {"success": True, "cart_item_id": created["id"]}


@router.patch("/api/cart/{item_id}")
def update_cart_item(
    item_id: str,
    update: CartItemUpdate,
    user: CurrentUser = Depends(require_customer),
    client: GraphQLClient = Depends(get_graphql_client),
):
    result = client.execute(queries.UPDATE_CART_ITEM, {
        "cartItemId": item_id, "userId": user.id, "quantity": update.quantity,
    })["update_cart_items"]
    if not result["affected_rows"]:
        return fail("Cart item not found", 404)
    return {"success": True}


@router.delete("/api/cart/{item_id}")
def remove_from_cart(
    item_id: str,
    user: CurrentUser = Depends(require_customer),
    client: GraphQLClient = Depends(get_graphql_client),
):
    result = client.execute(queries.REMOVE_FROM_CART, {"cartItemId": item_id, "userId": user.id})
    if not result["delete_cart_items"]["affected_rows"]:
        return fail("Cart item not found", 404)
    return {"success": True}


@router.delete("/api/cart")
def clear_cart(user: CurrentUser = Depends(require_customer), client: GraphQLClient = Depends(get_graphql_client)):
    result = client.execute(queries.CLEAR_CART, {"userId": user.id})
    return {"success": True, "removed": result["delete_cart_items"]["affected_rows"]}


# Wishlist

@router.get("/api/wishlist")
def get_wishlist(user: CurrentUser = Depends(require_customer), client: GraphQLClient = Depends(get_graphql_client)):
    items = client.execute(queries.GET_USER_WISHLIST, {"userId": user.id})["wishlist_items"]
    return {"success": True, "wishlist_items": items}


@router.post("/api/wishlist")
def add_to_wishlist(
    item: WishlistItemCreate,
    user: CurrentUser = Depends(require_customer),
    client: GraphQLClient = Depends(get_graphql_client),
):
    existing = client.execute(queries.GET_USER_WISHLIST, {"userId": user.id})["wishlist_items"]
    for entry in existing:
        if entry["product_id"] == item.product_id:
            return {"success": True, "wishlist_item": entry}
    created = client.execute(
        queries.ADD_TO_WISHLIST, {"userId": user.id, "productId": item.product_id}
    )["insert_wishlist_items_one"]
    return {"success": True, "wishlist_item": created}


@router.delete("/api/wishlist/{item_id}")
def remove_from_wishlist(
    item_id: str,
    user: CurrentUser = Depends(require_customer),
    client: GraphQLClient = Depends(get_graphql_client),
):
    result = client.execute(queries.REMOVE_FROM_WISHLIST, {"wishlistItemId": item_id, "userId": user.id})
    if not result["delete_wishlist_items"]["affected_rows"]:
        return fail("Wishlist item not found", 404)
    return {"success": True}


# Subscriptions

def _with_sellers(client: GraphQLClient, subscriptions: list) -> list:
    sellers = users_by_id(client, (s["seller_id"] for s in subscriptions))
    return [{**s, "seller": sellers.get(s["seller_id"])} for s in subscriptions]


@router.get("/customer/subscriptions")
def list_subscriptions(
    user: CurrentUser = Depends(require_customer),
    client: GraphQLClient = Depends(get_graphql_client),
):
    subs = client.execute(queries.GET_CUSTOMER_SUBSCRIPTIONS, {"customerId": user.id})["subscriptions"]
    return {"success": True, "subscriptions": _with_sellers(client, subs)}


@router.post("/customer/subscriptions/{seller_id}")
def subscribe(
    seller_id: str,
    user: CurrentUser = Depends(require_customer),
    client: GraphQLClient = Depends(get_graphql_client),
):
    existing = client.execute(queries.CHECK_USER_SUBSCRIBED, {"userId": user.id, "sellerId": seller_id})
    if existing["subscriptions"]:
        return {"success": True, "message": "Already subscribed", "subscription": existing["subscriptions"][0]}

    profiles = client.execute(queries.GET_SELLER_PROFILE, {"userId": seller_id})["seller_profiles"]
    if not profiles or not profiles[0]["is_approved"]:
        return fail("Seller not found", 404)

    created = client.execute(
        queries.SUBSCRIBE_TO_SELLER, {"customerId": user.id, "sellerId": seller_id}
    )["insert_subscriptions_one"]
    return {"success": True, "message": "Subscribed successfully", "subscription": created}


@router.delete("/customer/subscriptions/{seller_id}")
def unsubscribe(
    seller_id: str,
    user: CurrentUser = Depends(require_customer),
    client: GraphQLClient = Depends(get_graphql_client),
):
    result = client.execute(queries.UNSUBSCRIBE_FROM_SELLER, {"customerId": user.id, "sellerId": seller_id})
    return {
        "success": True,
        "message": "Unsubscribed successfully",
        "affected_rows": result["delete_subscriptions"]["affected_rows"],
    }


# Dashboard and orders

@router.get("/customer/dashboard")
def dashboard(user: CurrentUser = Depends(require_customer), client: GraphQLClient = Depends(get_graphql_client)):
    data = client.execute(queries.GET_CUSTOMER_DASHBOARD_STATS, {"customerId": user.id})
    return {
        "success": True,
        "stats": {
            "subscription_count": data["subscriptions_aggregate"]["aggregate"]["count"],
            "order_count": data["orders_aggregate"]["aggregate"]["count"],
            "recent_subscriptions": _with_sellers(client, data["subscriptions"]),
        },
    }


@router.get("/customer/orders")
def list_orders(user: CurrentUser = Depends(require_customer), client: GraphQLClient = Depends(get_graphql_client)):
    return {"success": True, "orders": list_customer_orders(client, user.id)}


# Notifications

@router.get("/customer/notifications")
def notifications(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: CurrentUser = Depends(require_customer),
    client: GraphQLClient = Depends(get_graphql_client),
):
    data = client.execute(
        queries.GET_USER_NOTIFICATIONS, {"userId": user.id, "limit": limit, "offset": offset}
    )
    return {"success": True, "notifications": data["notifications"]}


@router.get("/customer/notifications/unread-count")
def unread_count(user: CurrentUser = Depends(require_customer), client: GraphQLClient = Depends(get_graphql_client)):
    data = client.execute(queries.GET_UNREAD_NOTIFICATIONS_COUNT, {"userId": user.id})
    return {"success": True, "count": data["notifications_aggregate"]["aggregate"]["count"]}


@router.post("/customer/notifications/read-all")
def mark_all_read(user: CurrentUser = Depends(require_customer), client: GraphQLClient = Depends(get_graphql_client)):
    result = client.execute(queries.MARK_ALL_NOTIFICATIONS_AS_READ, {"userId": user.id})
    return {"success": True, "updated": result["update_notifications"]["affected_rows"]}


@router.post("/customer/notifications/{notification_id}/read")
def mark_read(
    notification_id: str,
    user: CurrentUser = Depends(require_customer),
    client: GraphQLClient = Depends(get_graphql_client),
):
    result = client.execute(
        queries.MARK_NOTIFICATION_AS_READ, {"notificationId": notification_id, "userId": user.id}
    )
    if not result["update_notifications"]["affected_rows"]:
        return fail("Notification not found", 404)
    return {"success": True}
