import logging

from fastapi import APIRouter, Depends

from shoptube import queries
from shoptube.auth import CurrentUser, hash_password, require_seller, verify_password
from shoptube.graphql_client import GraphQLClient, get_graphql_client
from shoptube.models import BusinessUpdate, OrderStatusUpdate, PasswordUpdate, ProductCreate, ProfileUpdate
from shoptube.orders import OrderTransitionError, update_seller_order_status, users_by_id
from shoptube.responses import fail

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/seller")


@router.get("/dashboard")
def dashboard(user: CurrentUser = Depends(require_seller), client: GraphQLClient = Depends(get_graphql_client)):
    data = client.execute(queries.GET_SELLER_DASHBOARD_STATS, {"sellerId": user.id})
    sales = (data["orders_aggregate"]["aggregate"].get("sum") or {}).get("total_amount")
    return {
        "success": True,
        "stats": {
            "total_sales": sales or 0,
            "product_count": data["products_aggregate"]["aggregate"]["count"] or 0,
            "subscriber_count": data["subscriptions_aggregate"]["aggregate"]["count"] or 0,
            "recent_orders": data["orders"] or [],
        },
    }


@router.get("/products")
def list_products(user: CurrentUser = Depends(require_seller), client: GraphQLClient = Depends(get_graphql_client)):
    products = client.execute(queries.GET_SELLER_PRODUCTS, {"sellerId": user.id})["products"]
    return {"success": True, "products": products}


@router.post("/products")
def create_product(
    product: ProductCreate,
    user: CurrentUser = Depends(require_seller),
    client: GraphQLClient = Depends(get_graphql_client),
):
    created = client.execute(queries.CREATE_PRODUCT, {
        "name": product.name,
        "description": product.description,
        "price": str(product.price),
        "stock": product.stock,
        "sellerId": user.id,
        "imageUrl": product.image_url or None,
    })["insert_products_one"]
    logger.info("Seller %s created product %s", user.id, created["id"])
    return {"success": True, "message": "Product created successfully", "product": created}


@router.get("/orders")
def list_orders(user: CurrentUser = Depends(require_seller), client: GraphQLClient = Depends(get_graphql_client)):
    orders = client.execute(queries.GET_SELLER_ORDERS, {"sellerId": user.id})["orders"]
    return {"success": True, "orders": orders or []}


@router.patch("/orders/{order_id}/status")
def update_order_status(
    order_id: str,
    update: OrderStatusUpdate,
    user: CurrentUser = Depends(require_seller),
    client: GraphQLClient = Depends(get_graphql_client),
):
    try:
        order = update_seller_order_status(client, order_id, user.id, update.status)
    except LookupError:
        return fail("Order not found", 404)
    except OrderTransitionError as e:
        return fail(str(e), 409)
    return {"success": True, "order": order}


@router.get("/subscribers")
def list_subscribers(user: CurrentUser = Depends(require_seller), client: GraphQLClient = Depends(get_graphql_client)):
    subs = client.execute(queries.GET_SELLER_SUBSCRIBERS, {"sellerId": user.id})["subscriptions"]
    customers = users_by_id(client, (s["customer_id"] for s in subs))
    return {"success": True, "subscribers": [{**s, "user": customers.get(s["customer_id"])} for s in subs]}


# Settings

@router.get("/settings")
def get_profile(user: CurrentUser = Depends(require_seller), client: GraphQLClient = Depends(get_graphql_client)):
    account = client.execute(queries.GET_USER_BY_ID, {"userId": user.id})["users_by_pk"]
    if not account:
        return fail("User not found", 404)
    profiles = client.execute(queries.GET_SELLER_PROFILE, {"userId": user.id})["seller_profiles"]
    return {"success": True, "user": account, "profile": profiles[0] if profiles else None}


@router.put("/settings/profile")
def update_profile(
    update: ProfileUpdate,
    user: CurrentUser = Depends(require_seller),
    client: GraphQLClient = Depends(get_graphql_client),
):
    email = update.email.strip().lower()
    taken = client.execute(queries.GET_USER_BY_EMAIL, {"email": email})["users"]
    if any(u["id"] != user.id for u in taken):
        return fail("Email already in use", 409)
    client.execute(queries.UPDATE_USER_PROFILE, {"userId": user.id, "name": update.name, "email": email})
    return {"success": True}


@router.put("/settings/business")
def update_business(
    update: BusinessUpdate,
    user: CurrentUser = Depends(require_seller),
    client: GraphQLClient = Depends(get_graphql_client),
):
    result = client.execute(queries.UPDATE_SELLER_PROFILE, {
        "userId": user.id, "businessName": update.business_name, "description": update.description,
    })["update_seller_profiles"]
    if not result["affected_rows"]:
        return fail("Seller profile not found", 404)
    return {"success": True}


@router.put("/settings/password")
def update_password(
    update: PasswordUpdate,
    user: CurrentUser = Depends(require_seller),
    client: GraphQLClient = Depends(get_graphql_client),
):
    account = client.execute(queries.GET_USER_PASSWORD_HASH, {"userId": user.id})["users_by_pk"]
    if not account:
        return fail("User not found", 404)
    if not verify_password(update.current_password, account["password_hash"]):
        return fail("Current password is incorrect", 400)
    client.execute(queries.UPDATE_PASSWORD, {"userId": user.id, "passwordHash": hash_password(update.new_password)})
    logger.info("Password changed for user %s", user.id)
    return {"success": True}
