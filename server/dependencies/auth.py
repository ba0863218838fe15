import secrets

from fastapi import Header, Request

from shared.exceptions.RAGErrors import UnauthorizedError


async def verify_api_key(request: Request, x_api_key: str | None = Header(None)) -> None:
    """Verify the X-Api-Key header against the configured API key.

    Args:
        request (Request): The FastAPI request object (provides app.state).
        x_api_key (str | None): The value of the X-Api-Key header.

    Raises:
        UnauthorizedError: If the key is missing or does not match.
    """
    helper_config = request.app.state.helper_config
    expected_key = helper_config.get_string_val("APP_API_KEY")
    if not x_api_key or not secrets.compare_digest(x_api_key, expected_key):
        raise UnauthorizedError("Invalid or missing API key")


async def get_owner_id(x_owner_id: str | None = Header(None)) -> str:
    """Return the authenticated owner id passed by the upstream auth layer in X-Owner-Id.

    Raises:
        UnauthorizedError: If the header is missing or blank.
    """
    if not x_owner_id or not x_owner_id.strip():
        raise UnauthorizedError("Unauthorized")
    return x_owner_id.strip()
