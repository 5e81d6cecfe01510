import logging
import uuid
from typing import Any, Dict, Optional

import requests

from shoptube.config import get_settings

logger = logging.getLogger(__name__)

COMMON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class GraphQLError(Exception):
    """Raised when the hosted data layer cannot serve a request."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []


class GraphQLClient:
    """Thin client for the hosted GraphQL endpoint, authenticated with the
    ``x-hasura-admin-secret`` header. Returns the ``data`` member of a response."""

    def __init__(self, endpoint: str, admin_secret: Optional[str] = None, timeout: float = 30):
        self.endpoint = endpoint
        self.timeout = timeout
        self.headers = dict(COMMON_HEADERS)
        if admin_secret:
            self.headers["x-hasura-admin-secret"] = admin_secret

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            resp = requests.post(
                self.endpoint,
                json={"query": query, "variables": variables or {}},
                headers=self.headers,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as e:
            logger.warning("GraphQL transport error: %s", e)
            raise GraphQLError(f"Data layer unreachable: {e}") from e
        except ValueError as e:
            raise GraphQLError("Data layer returned a non-JSON response") from e

        if body.get("errors"):
            messages = "; ".join(err.get("message", "unknown error") for err in body["errors"])
            logger.warning("GraphQL errors: %s", messages)
            raise GraphQLError(messages, body["errors"])
        return body.get("data") or {}


def is_uuid(value) -> bool:
    """Ids bound to `uuid!` variables; anything else is rejected by the schema."""
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def get_graphql_client() -> GraphQLClient:
    settings = get_settings()
    return GraphQLClient(
        settings.hasura_endpoint,
        admin_secret=settings.hasura_admin_secret,
        timeout=settings.http_timeout,
    )
