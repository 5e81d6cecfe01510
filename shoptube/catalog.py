from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from shoptube import queries
from shoptube.auth import CurrentUser, optional_user
from shoptube.graphql_client import GraphQLClient, get_graphql_client, is_uuid
from shoptube.responses import fail

router = APIRouter()

UNKNOWN_SELLER = "Unknown Seller"
UNKNOWN_BUSINESS = "Unknown Business"


def seller_summaries(client: GraphQLClient, seller_ids) -> dict:
    """Map seller user id -> ``{id, name, seller_profile}`` for the given ids."""
    ids = sorted({i for i in seller_ids if i})
    if not ids:
        return {}
    data = client.execute(queries.GET_SELLER_SUMMARIES, {"ids": ids})
    profiles = {p["user_id"]: p for p in data["seller_profiles"]}
    return {
        u["id"]: {"id": u["id"], "name": u["name"], "seller_profile": profiles.get(u["id"])}
        for u in data["users"]
    }


def is_subscribed(client: GraphQLClient, user: Optional[CurrentUser], seller_id: str) -> bool:
    if user is None or user.role != "customer" or not seller_id:
        return False
    subs = client.execute(queries.CHECK_USER_SUBSCRIBED, {"userId": user.id, "sellerId": seller_id})
    return bool(subs["subscriptions"])


@router.get("/marketplace")
def marketplace(
    limit: int = Query(12, ge=1, le=100),
    offset: int = Query(0, ge=0),
    search: str = "",
    client: GraphQLClient = Depends(get_graphql_client),
):
    pattern = f"%{search.strip()}%"
    products = client.execute(
        queries.GET_MARKETPLACE_PRODUCTS, {"limit": limit, "offset": offset, "search": pattern}
    )["products"]
    sellers = seller_summaries(client, (p["seller_id"] for p in products))

    listed = []
    for product in products:
        seller = sellers.get(product["seller_id"])
        # only approved shops are listed
        if seller and seller["seller_profile"] and seller["seller_profile"]["is_approved"]:
            listed.append({**product, "seller": seller})
    return {"success": True, "products": listed, "total_count": len(listed)}


def _explore_entry(product: dict, seller: Optional[dict]) -> dict:
    profile = (seller or {}).get("seller_profile") or {}
    return {
        "id": product["id"],
        "name": product["name"],
        "description": product.get("description") or "",
        "price": product.get("price") or 0,
        "image_url": product.get("image_url"),
        "seller_id": product["seller_id"],
        "created_at": product.get("created_at"),
        "seller": {
            "id": product["seller_id"],
            "name": (seller or {}).get("name") or UNKNOWN_SELLER,
            "seller_profile": {"business_name": profile.get("business_name") or UNKNOWN_BUSINESS},
        },
    }


@router.get("/explore")
def explore(client: GraphQLClient = Depends(get_graphql_client)):
    products = client.execute(queries.GET_PRODUCTS)["products"]
    sellers = seller_summaries(client, (p["seller_id"] for p in products))
    return {"success": True, "products": [_explore_entry(p, sellers.get(p["seller_id"])) for p in products]}


@router.get("/product/{product_id}")
def product_detail(
    product_id: str,
    user: Optional[CurrentUser] = Depends(optional_user),
    client: GraphQLClient = Depends(get_graphql_client),
):
    if not is_uuid(product_id):
        return fail("Product not found", 404)
    product = client.execute(queries.GET_PRODUCT_BY_ID, {"productId": product_id})["products_by_pk"]
    if not product:
        return fail("Product not found", 404)
    product["seller"] = seller_summaries(client, [product["seller_id"]]).get(product["seller_id"])
    return {
        "success": True,
        "product": product,
        "is_subscribed": is_subscribed(client, user, product["seller_id"]),
    }


@router.get("/shop/{seller_id}")
def shop(
    seller_id: str,
    user: Optional[CurrentUser] = Depends(optional_user),
    client: GraphQLClient = Depends(get_graphql_client),
):
    if not is_uuid(seller_id):
        return fail("Seller not found", 404)
    data = client.execute(queries.GET_SELLER_WITH_PRODUCTS, {"sellerId": seller_id})
    if not data["users_by_pk"]:
        return fail("Seller not found", 404)

    profiles = data["seller_profiles"]
    seller = {
        "id": data["users_by_pk"]["id"],
        "name": data["users_by_pk"]["name"],
        "seller_profile": profiles[0] if profiles else {
            "id": "", "business_name": UNKNOWN_BUSINESS, "description": "",
        },
        "products": data["products"] or [],
    }
    return {"success": True, "seller": seller, "is_subscribed": is_subscribed(client, user, seller_id)}


@router.get("/api/products/batch")
def products_batch(ids: Optional[str] = None, client: GraphQLClient = Depends(get_graphql_client)):
    id_list: List[str] = [i.strip() for i in (ids or "").split(",") if i.strip()]
    if not id_list:
        return fail("Product IDs are required", 400)
    products = client.execute(queries.GET_PRODUCTS_BY_IDS, {"ids": id_list})["products"]
    return {"success": True, "products": products}
