from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from todo_platform.core.security import TokenClaims, verify_token

# Extracts the token from "Authorization: Bearer <token>"
# tokenUrl points at the identity service's login route for the OpenAPI docs
# auto_error=False so a missing header maps to our own MissingTokenError
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)


async def get_current_claims(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
) -> TokenClaims:
    """
    Authenticate the caller from the bearer token alone.

    No user lookup happens here: the todo service has no access to the
    Credential Store and trusts any correctly signed, unexpired token.
    The claims are attached to request.state for the rest of this request.
    """
    # Raises MissingTokenError / InvalidTokenError, mapped to 401 by the handlers
    claims = verify_token(token)
    request.state.auth = claims
    return claims
