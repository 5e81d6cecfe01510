import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from shoptube import accounts, admin, catalog, customer, seller
from shoptube.config import configure_logging, get_settings
from shoptube.graphql_client import GraphQLError
from shoptube.responses import fail
from shoptube.routes import router

logger = logging.getLogger(__name__)

configure_logging(get_settings().log_level)

app = FastAPI(title="ShopTube Marketplace")

app.include_router(router)
app.include_router(accounts.router)
app.include_router(catalog.router)
app.include_router(customer.router)
app.include_router(seller.router)
app.include_router(admin.router)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return fail(str(exc.detail), exc.status_code)


@app.exception_handler(RequestValidationError)
async def invalid_request(request: Request, exc: RequestValidationError):
    return fail("Missing or invalid request data", 400)


@app.exception_handler(GraphQLError)
async def data_layer_error(request: Request, exc: GraphQLError):
    logger.error("Data layer request failed on %s %s: %s", request.method, request.url.path, exc)
    return fail("Data layer request failed", 500)
