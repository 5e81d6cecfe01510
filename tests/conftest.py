import re
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from shoptube.auth import generate_token, hash_password
from shoptube.graphql_client import GraphQLError, get_graphql_client
from shoptube.main import app as fastapi_app

OPERATION = re.compile(r"\b(?:query|mutation)\s+(\w+)")
HANDLERS = {}


def handles(name):
    def register(fn):
        HANDLERS[name] = fn
        return fn
    return register


def _now():
    return datetime.now(timezone.utc).isoformat()


def _like(pattern, value):
    needle = pattern.strip("%").lower()
    return needle in (value or "").lower()


class FakeDataLayer:
    """In-memory stand-in for the hosted GraphQL service.

    Dispatches on the operation name of each document and keeps every call in
    ``calls`` so tests can assert what reached the data layer.
    """

    def __init__(self):
        self.users = {}
        self.seller_profiles = {}
        self.products = {}
        self.orders = {}
        self.cart_items = {}
        self.wishlist_items = {}
        self.subscriptions = {}
        self.notifications = {}
        self.calls = []

    def execute(self, query, variables=None):
        name = OPERATION.search(query).group(1)
        self.calls.append(name)
        if name not in HANDLERS:
            raise GraphQLError(f"operation {name} not supported by fake")
        return HANDLERS[name](self, variables or {})

    # seeding helpers

    def add_user(self, role="customer", name="Test User", email=None, password="secret-pass"):
        uid = str(uuid.uuid4())
        user = {
            "id": uid,
            "name": name,
            "email": email or f"{uid[:8]}@example.com",
            "role": role,
            "password_hash": hash_password(password),
            "created_at": _now(),
        }
        self.users[uid] = user
        return user

    def add_seller(self, name="Shop Owner", business_name="Shop", approved=True, **kwargs):
        user = self.add_user(role="seller", name=name, **kwargs)
        pid = str(uuid.uuid4())
        self.seller_profiles[pid] = {
            "id": pid,
            "user_id": user["id"],
            "business_name": business_name,
            "description": "",
            "is_approved": approved,
            "created_at": _now(),
        }
        return user, self.seller_profiles[pid]

    def add_product(self, seller_id, name="Product", price="10.00", stock=10, description=""):
        pid = str(uuid.uuid4())
        self.products[pid] = {
            "id": pid,
            "name": name,
            "description": description,
            "price": price,
            "stock": stock,
            "image_url": None,
            "seller_id": seller_id,
            "created_at": _now(),
        }
        return self.products[pid]

    def add_notification(self, user_id, title="New product", is_read=False):
        nid = str(uuid.uuid4())
        self.notifications[nid] = {
            "id": nid,
            "user_id": user_id,
            "title": title,
            "message": title,
            "type": "new_product",
            "is_read": is_read,
            "created_at": _now(),
            "product_id": None,
            "seller_id": None,
        }
        return self.notifications[nid]

    def orders_for(self, tx_ref):
        return [o for o in self.orders.values() if o["tx_ref"] == tx_ref]

    def _public_user(self, user):
        return {k: user[k] for k in ("id", "name", "email", "role", "created_at")}

    def _order_view(self, order):
        items = []
        for item in order["order_items"]:
            product = self.products.get(item["product_id"]) or {}
            items.append({
                "id": item["id"],
                "quantity": item["quantity"],
                "price_per_unit": item["price_per_unit"],
                "product": {
                    "id": item["product_id"],
                    "name": product.get("name"),
                    "image_url": product.get("image_url"),
                    "seller_id": product.get("seller_id"),
                },
            })
        return {**{k: v for k, v in order.items() if k != "order_items"}, "order_items": items}


# users

@handles("GetUserByEmail")
def _get_user_by_email(db, v):
    return {"users": [u for u in db.users.values() if u["email"] == v["email"]]}


@handles("GetUserById")
def _get_user_by_id(db, v):
    user = db.users.get(v["userId"])
    return {"users_by_pk": db._public_user(user) if user else None}


@handles("GetUserPasswordHash")
def _get_user_password_hash(db, v):
    user = db.users.get(v["userId"])
    return {"users_by_pk": {"id": user["id"], "password_hash": user["password_hash"]} if user else None}


@handles("GetUsersByIds")
def _get_users_by_ids(db, v):
    return {"users": [db._public_user(db.users[i]) for i in v["ids"] if i in db.users]}


@handles("CreateUser")
def _create_user(db, v):
    uid = str(uuid.uuid4())
    db.users[uid] = {**v, "id": uid, "created_at": _now()}
    return {"insert_users_one": {k: db.users[uid][k] for k in ("id", "name", "email", "role")}}


@handles("UpdateUserProfile")
def _update_user_profile(db, v):
    user = db.users.get(v["userId"])
    if not user:
        return {"update_users_by_pk": None}
    user.update(name=v["name"], email=v["email"])
    return {"update_users_by_pk": {"id": user["id"], "name": user["name"], "email": user["email"]}}


@handles("UpdatePassword")
def _update_password(db, v):
    db.users[v["userId"]]["password_hash"] = v["passwordHash"]
    return {"update_users_by_pk": {"id": v["userId"]}}


# seller profiles

@handles("GetSellerProfile")
def _get_seller_profile(db, v):
    return {"seller_profiles": [p for p in db.seller_profiles.values() if p["user_id"] == v["userId"]]}


@handles("CreateSellerProfile")
def _create_seller_profile(db, v):
    pid = str(uuid.uuid4())
    db.seller_profiles[pid] = {
        "id": pid,
        "user_id": v["userId"],
        "business_name": v["businessName"],
        "description": v.get("description"),
        "is_approved": False,
        "created_at": _now(),
    }
    return {"insert_seller_profiles_one": {"id": pid, "business_name": v["businessName"]}}


@handles("UpdateSellerProfile")
def _update_seller_profile(db, v):
    mine = [p for p in db.seller_profiles.values() if p["user_id"] == v["userId"]]
    for p in mine:
        p.update(business_name=v["businessName"], description=v.get("description"))
    return {"update_seller_profiles": {"affected_rows": len(mine)}}


@handles("GetSellerWithProducts")
def _get_seller_with_products(db, v):
    user = db.users.get(v["sellerId"])
    return {
        "users_by_pk": {"id": user["id"], "name": user["name"]} if user else None,
        "seller_profiles": [p for p in db.seller_profiles.values() if p["user_id"] == v["sellerId"]],
        "products": [dict(p) for p in db.products.values() if p["seller_id"] == v["sellerId"]],
    }


@handles("ApproveSeller")
def _approve_seller(db, v):
    profile = db.seller_profiles.get(v["profileId"])
    if profile:
        profile["is_approved"] = True
    return {"update_seller_profiles_by_pk": profile}


@handles("GetPendingSellers")
def _get_pending_sellers(db, v):
    pending = []
    for p in db.seller_profiles.values():
        if not p["is_approved"]:
            user = db.users[p["user_id"]]
            pending.append({**p, "user": {"name": user["name"], "email": user["email"]}})
    return {"seller_profiles": pending}


@handles("GetSellerSummaries")
def _get_seller_summaries(db, v):
    return {
        "users": [{"id": i, "name": db.users[i]["name"]} for i in v["ids"] if i in db.users],
        "seller_profiles": [p for p in db.seller_profiles.values() if p["user_id"] in v["ids"]],
    }


# products

@handles("GetProducts")
def _get_products(db, v):
    return {"products": [dict(p) for p in db.products.values()]}


@handles("GetSellerProducts")
def _get_seller_products(db, v):
    return {"products": [dict(p) for p in db.products.values() if p["seller_id"] == v["sellerId"]]}


@handles("GetProductById")
def _get_product_by_id(db, v):
    product = db.products.get(v["productId"])
    return {"products_by_pk": dict(product) if product else None}


@handles("GetProductsByIds")
def _get_products_by_ids(db, v):
    return {"products": [dict(db.products[i]) for i in v["ids"] if i in db.products]}


@handles("CreateProduct")
def _create_product(db, v):
    product = db.add_product(v["sellerId"], name=v["name"], price=v["price"], stock=v["stock"],
                             description=v["description"])
    product["image_url"] = v.get("imageUrl")
    return {"insert_products_one": dict(product)}


@handles("GetMarketplaceProducts")
def _get_marketplace_products(db, v):
    matches = [
        dict(p) for p in db.products.values()
        if _like(v["search"], p["name"]) or _like(v["search"], p["description"])
    ]
    return {"products": matches[v["offset"]:v["offset"] + v["limit"]]}


# cart

@handles("GetUserCart")
def _get_user_cart(db, v):
    items = []
    for item in db.cart_items.values():
        if item["customer_id"] == v["userId"]:
            product = db.products[item["product_id"]]
            items.append({
                "id": item["id"],
                "quantity": item["quantity"],
                "product": {k: product[k] for k in ("id", "name", "price", "stock", "image_url")},
            })
    return {"cart_items": items}


@handles("AddToCart")
def _add_to_cart(db, v):
    iid = str(uuid.uuid4())
    db.cart_items[iid] = {"id": iid, "customer_id": v["userId"], "product_id": v["productId"],
                          "quantity": v["quantity"]}
    return {"insert_cart_items_one": {"id": iid}}


@handles("UpdateCartItem")
def _update_cart_item(db, v):
    item = db.cart_items.get(v["cartItemId"])
    if not item or item["customer_id"] != v["userId"]:
        return {"update_cart_items": {"affected_rows": 0}}
    item["quantity"] = v["quantity"]
    return {"update_cart_items": {"affected_rows": 1}}


@handles("RemoveFromCart")
def _remove_from_cart(db, v):
    item = db.cart_items.get(v["cartItemId"])
    if not item or item["customer_id"] != v["userId"]:
        return {"delete_cart_items": {"affected_rows": 0}}
    del db.cart_items[v["cartItemId"]]
    return {"delete_cart_items": {"affected_rows": 1}}


@handles("ClearCart")
def _clear_cart(db, v):
    mine = [k for k, item in db.cart_items.items() if item["customer_id"] == v["userId"]]
    for k in mine:
        del db.cart_items[k]
    return {"delete_cart_items": {"affected_rows": len(mine)}}


# wishlist

@handles("GetUserWishlist")
def _get_user_wishlist(db, v):
    return {"wishlist_items": [
        {k: w[k] for k in ("id", "product_id", "created_at")}
        for w in db.wishlist_items.values() if w["customer_id"] == v["userId"]
    ]}


@handles("AddToWishlist")
def _add_to_wishlist(db, v):
    wid = str(uuid.uuid4())
    db.wishlist_items[wid] = {"id": wid, "customer_id": v["userId"], "product_id": v["productId"],
                              "created_at": _now()}
    return {"insert_wishlist_items_one": {k: db.wishlist_items[wid][k] for k in ("id", "product_id", "created_at")}}


@handles("RemoveFromWishlist")
def _remove_from_wishlist(db, v):
    item = db.wishlist_items.get(v["wishlistItemId"])
    if not item or item["customer_id"] != v["userId"]:
        return {"delete_wishlist_items": {"affected_rows": 0}}
    del db.wishlist_items[v["wishlistItemId"]]
    return {"delete_wishlist_items": {"affected_rows": 1}}


# subscriptions

@handles("CheckUserSubscribed")
def _check_user_subscribed(db, v):
    return {"subscriptions": [
        s for s in db.subscriptions.values()
        if s["customer_id"] == v["userId"] and s["seller_id"] == v["sellerId"]
    ]}


@handles("SubscribeToSeller")
def _subscribe_to_seller(db, v):
    sid = str(uuid.uuid4())
    db.subscriptions[sid] = {"id": sid, "customer_id": v["customerId"], "seller_id": v["sellerId"],
                             "created_at": _now()}
    return {"insert_subscriptions_one": dict(db.subscriptions[sid])}


@handles("UnsubscribeFromSeller")
def _unsubscribe_from_seller(db, v):
    mine = [k for k, s in db.subscriptions.items()
            if s["customer_id"] == v["customerId"] and s["seller_id"] == v["sellerId"]]
    for k in mine:
        del db.subscriptions[k]
    return {"delete_subscriptions": {"affected_rows": len(mine)}}


@handles("GetSellerSubscribers")
def _get_seller_subscribers(db, v):
    return {"subscriptions": [
        {k: s[k] for k in ("id", "created_at", "customer_id")}
        for s in db.subscriptions.values() if s["seller_id"] == v["sellerId"]
    ]}


@handles("GetCustomerSubscriptions")
def _get_customer_subscriptions(db, v):
    return {"subscriptions": [
        {k: s[k] for k in ("id", "created_at", "seller_id")}
        for s in db.subscriptions.values() if s["customer_id"] == v["customerId"]
    ]}


# orders

@handles("CreateOrder")
def _create_order(db, v):
    oid = str(uuid.uuid4())
    db.orders[oid] = {
        "id": oid,
        "customer_id": v["userId"],
        "total_amount": v["totalAmount"],
        "status": v["status"],
        "shipping_address": v["shippingAddress"],
        "tx_ref": v["txRef"],
        "created_at": _now(),
        "order_items": [{**item, "id": str(uuid.uuid4())} for item in v["orderItems"]],
    }
    return {"insert_orders_one": {"id": oid, "status": v["status"], "tx_ref": v["txRef"]}}


@handles("GetOrderByTxRef")
def _get_order_by_tx_ref(db, v):
    return {"orders": [
        {k: o[k] for k in ("id", "customer_id", "total_amount", "status", "tx_ref")}
        for o in db.orders_for(v["txRef"])
    ]}


@handles("UpdateOrderStatusByTxRef")
def _update_order_status_by_tx_ref(db, v):
    hits = [o for o in db.orders_for(v["txRef"]) if o["status"] == v["fromStatus"]]
    for o in hits:
        o["status"] = v["status"]
    return {"update_orders": {
        "affected_rows": len(hits),
        "returning": [{"id": o["id"], "status": o["status"]} for o in hits],
    }}


@handles("GetOrderById")
def _get_order_by_id(db, v):
    order = db.orders.get(v["orderId"])
    if not order or order["customer_id"] != v["userId"]:
        return {"orders": []}
    return {"orders": [db._order_view(order)]}


@handles("GetUserOrders")
def _get_user_orders(db, v):
    return {"orders": [db._order_view(o) for o in db.orders.values() if o["customer_id"] == v["userId"]]}


@handles("GetSellerOrder")
def _get_seller_order(db, v):
    order = db.orders.get(v["orderId"])
    if not order:
        return {"orders": []}
    sellers = {(db.products.get(i["product_id"]) or {}).get("seller_id") for i in order["order_items"]}
    if v["sellerId"] not in sellers:
        return {"orders": []}
    return {"orders": [{"id": order["id"], "status": order["status"]}]}


@handles("UpdateOrderStatusById")
def _update_order_status_by_id(db, v):
    order = db.orders.get(v["orderId"])
    if not order or order["status"] != v["fromStatus"]:
        return {"update_orders": {"affected_rows": 0}}
    order["status"] = v["status"]
    return {"update_orders": {"affected_rows": 1}}


# dashboards

def _count(n):
    return {"aggregate": {"count": n}}


@handles("GetAdminDashboardStats")
def _get_admin_dashboard_stats(db, v):
    paid = [o for o in db.orders.values() if o["status"] not in ("payment_pending", "failed")]
    revenue = sum(Decimal(o["total_amount"]) for o in paid) if paid else None
    return {
        "users_aggregate": _count(len(db.users)),
        "seller_profiles_aggregate": _count(sum(1 for p in db.seller_profiles.values() if p["is_approved"])),
        "products_aggregate": _count(len(db.products)),
        "orders_aggregate": {"aggregate": {"sum": {"total_amount": str(revenue) if revenue is not None else None}}},
    }


@handles("GetRecentUsers")
def _get_recent_users(db, v):
    return {"users": [db._public_user(u) for u in db.users.values()][:v["limit"]]}


@handles("GetRecentProducts")
def _get_recent_products(db, v):
    return {"products": [
        {k: p[k] for k in ("id", "name", "price", "stock", "created_at", "seller_id")}
        for p in db.products.values()
    ][:v["limit"]]}


# notifications

def _notifications_of(db, user_id):
    return [n for n in db.notifications.values() if n["user_id"] == user_id]


@handles("GetUserNotifications")
def _get_user_notifications(db, v):
    mine = [{k: n[k] for k in n if k != "user_id"} for n in _notifications_of(db, v["userId"])]
    return {"notifications": mine[v["offset"]:v["offset"] + v["limit"]]}


@handles("GetUnreadNotificationsCount")
def _get_unread_notifications_count(db, v):
    return {"notifications_aggregate": _count(sum(1 for n in _notifications_of(db, v["userId"]) if not n["is_read"]))}


@handles("MarkNotificationAsRead")
def _mark_notification_as_read(db, v):
    hits = [n for n in _notifications_of(db, v["userId"]) if n["id"] == v["notificationId"]]
    for n in hits:
        n["is_read"] = True
    return {"update_notifications": {"affected_rows": len(hits)}}


@handles("MarkAllNotificationsAsRead")
def _mark_all_notifications_as_read(db, v):
    hits = [n for n in _notifications_of(db, v["userId"]) if not n["is_read"]]
    for n in hits:
        n["is_read"] = True
    return {"update_notifications": {"affected_rows": len(hits)}}


def order_total(order):
    return sum(Decimal(i["price_per_unit"]) * i["quantity"] for i in order["order_items"])


@pytest.fixture
def data_layer():
    return FakeDataLayer()


@pytest.fixture
def client(data_layer):
    fastapi_app.dependency_overrides[get_graphql_client] = lambda: data_layer
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def build(user):
        return {"Authorization": f"Bearer {generate_token(user)}"}
    return build
