import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from shoptube import queries
from shoptube.auth import COOKIE_NAME, CurrentUser, generate_token, hash_password, optional_user, verify_password
from shoptube.config import get_settings
from shoptube.graphql_client import GraphQLClient, get_graphql_client
from shoptube.models import LoginRequest, SignupRequest
from shoptube.responses import fail

logger = logging.getLogger(__name__)

router = APIRouter()

SIGNUP_ROLES = ("customer", "seller")
PENDING_APPROVAL = "Your seller account is pending approval. You'll be notified once it's approved."


def _public_user(user: dict) -> dict:
    return {"id": user["id"], "name": user["name"], "email": user["email"], "role": user["role"]}


def _with_session_cookie(body: dict, token: str) -> JSONResponse:
    resp = JSONResponse(body)
    resp.set_cookie(
        COOKIE_NAME,
        token,
        max_age=get_settings().jwt_expire_hours * 3600,
        httponly=True,
        samesite="lax",
        path="/",
    )
    return resp


@router.post("/auth/signup")
def signup(request: SignupRequest, client: GraphQLClient = Depends(get_graphql_client)):
    email = request.email.strip().lower()
    if not request.name or not email or not request.password or not request.role:
        return fail("All fields are required", 400)
    if request.role not in SIGNUP_ROLES:
        return fail("Invalid role", 400)
    if request.role == "seller" and not request.business_name:
        return fail("Business name is required for sellers", 400)

    if client.execute(queries.GET_USER_BY_EMAIL, {"email": email})["users"]:
        return fail("Email already in use", 409)

    user = client.execute(queries.CREATE_USER, {
        "name": request.name,
        "email": email,
        "password_hash": hash_password(request.password),
        "role": request.role,
    })["insert_users_one"]

    if request.role == "seller":
        client.execute(queries.CREATE_SELLER_PROFILE, {
            "userId": user["id"],
            "businessName": request.business_name,
            "description": request.business_description or None,
        })
        logger.info("Seller application submitted by user %s", user["id"])
        return {
            "success": True,
            "user": _public_user(user),
            "token": None,
            "message": "Your seller application has been submitted for review. "
                       "You'll be notified once it's approved.",
        }

    token = generate_token(user)
    return _with_session_cookie({
        "success": True,
        "user": _public_user(user),
        "token": token,
        "message": "Account created successfully.",
    }, token)


@router.post("/auth/login")
def login(request: LoginRequest, client: GraphQLClient = Depends(get_graphql_client)):
    email = request.email.strip().lower()
    if not email or not request.password:
        return fail("Email and password are required", 400)

    users = client.execute(queries.GET_USER_BY_EMAIL, {"email": email})["users"]
    if not users or not verify_password(request.password, users[0]["password_hash"]):
        return fail("Invalid email or password", 401)
    user = users[0]

    if user["role"] == "seller":
        profiles = client.execute(queries.GET_SELLER_PROFILE, {"userId": user["id"]})["seller_profiles"]
        if not profiles or not profiles[0]["is_approved"]:
            return fail(PENDING_APPROVAL, 403)

    token = generate_token(user)
    return _with_session_cookie({"success": True, "user": _public_user(user), "token": token}, token)


@router.post("/auth/logout")
def logout():
    resp = JSONResponse({"success": True})
    resp.delete_cookie(COOKIE_NAME, path="/")
    return resp


@router.get("/api/session")
def session(user: CurrentUser = Depends(optional_user)):
    if user is None:
        return {"user": None, "token": None}
    return {"user": user.to_dict(), "token": user.token}
