import logging

from fastapi import APIRouter, Depends

from shoptube import queries
from shoptube.auth import CurrentUser, require_admin
from shoptube.catalog import UNKNOWN_SELLER
from shoptube.config import get_settings
from shoptube.graphql_client import GraphQLClient, get_graphql_client, is_uuid
from shoptube.orders import users_by_id
from shoptube.responses import fail

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin")


def _pending_sellers(client: GraphQLClient) -> list:
    return client.execute(queries.GET_PENDING_SELLERS)["seller_profiles"]


@router.get("/dashboard")
def dashboard(user: CurrentUser = Depends(require_admin), client: GraphQLClient = Depends(get_graphql_client)):
    stats = client.execute(queries.GET_ADMIN_DASHBOARD_STATS)
    revenue = (stats["orders_aggregate"]["aggregate"].get("sum") or {}).get("total_amount")

    products = client.execute(queries.GET_RECENT_PRODUCTS, {"limit": 5})["products"]
    sellers = users_by_id(client, (p["seller_id"] for p in products))
    recent_products = [
        {**p, "seller": sellers.get(p["seller_id"]) or {"name": UNKNOWN_SELLER}} for p in products
    ]

    return {
        "success": True,
        "stats": {
            "total_users": stats["users_aggregate"]["aggregate"]["count"],
            "active_sellers": stats["seller_profiles_aggregate"]["aggregate"]["count"],
            "total_products": stats["products_aggregate"]["aggregate"]["count"],
            "platform_revenue": revenue or 0,
        },
        "pending_sellers": _pending_sellers(client)[:3],
        "recent_users": client.execute(queries.GET_RECENT_USERS, {"limit": 5})["users"],
        "recent_products": recent_products,
    }


@router.get("/sellers")
def pending_sellers(user: CurrentUser = Depends(require_admin), client: GraphQLClient = Depends(get_graphql_client)):
    return {"success": True, "pending_sellers": _pending_sellers(client)}


@router.post("/sellers/{profile_id}/approve")
def approve_seller(
    profile_id: str,
    user: CurrentUser = Depends(require_admin),
    client: GraphQLClient = Depends(get_graphql_client),
):
    if not is_uuid(profile_id):
        return fail("Seller application not found", 404)
    profile = client.execute(queries.APPROVE_SELLER, {"profileId": profile_id})["update_seller_profiles_by_pk"]
    if not profile:
        return fail("Seller application not found", 404)
    logger.info("Seller profile %s approved by admin %s", profile_id, user.id)
    return {"success": True, "message": "Seller approved successfully", "profile": profile}


@router.get("/customers")
def customers(user: CurrentUser = Depends(require_admin), client: GraphQLClient = Depends(get_graphql_client)):
    rows = client.execute(queries.GET_CUSTOMERS)["users"]
    return {
        "success": True,
        "customers": [
            {
                "id": row["id"],
                "name": row["name"],
                "email": row["email"],
                "created_at": row["created_at"],
                "subscription_count": row["subscriptions_aggregate"]["aggregate"]["count"],
                "order_count": row["orders_aggregate"]["aggregate"]["count"],
                "total_spent": (row["orders_aggregate"]["aggregate"].get("sum") or {}).get("total_amount") or 0,
            }
            for row in rows
        ],
    }


@router.get("/products")
def products(user: CurrentUser = Depends(require_admin), client: GraphQLClient = Depends(get_graphql_client)):
    return {"success": True, "products": client.execute(queries.GET_PRODUCTS)["products"]}


@router.get("/settings")
def platform_settings(user: CurrentUser = Depends(require_admin)):
    settings = get_settings()
    return {
        "success": True,
        "settings": {
            "general": {
                "site_name": settings.site_name,
                "contact_email": settings.contact_email,
                "support_phone": settings.support_phone,
            },
            "payments": {
                "currency": settings.currency,
                "platform_fee_percent": str(settings.platform_fee_percent),
            },
        },
    }
