"""
Client-side session holder for the two services.

The token is never installed as a default header on a shared client. It is
held on an ApiSession and passed explicitly to build_request for every call
until logout() drops it.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional
import httpx
from jose import JWTError, jwt

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Failure envelope returned by either service"""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class NotAuthenticatedError(ApiError):
    def __init__(self):
        super().__init__(401, "Not logged in")


@dataclass(frozen=True)
class ApiSession:
    token: str
    user_id: str
    email: str


def auth_headers(token: Optional[str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}


def build_request(
    client: httpx.Client,
    method: str,
    url: str,
    token: Optional[str] = None,
    json: Any = None,
    params: Optional[dict] = None,
) -> httpx.Request:
    """Build a request carrying the given bearer token, if any"""
    return client.build_request(method, url, headers=auth_headers(token), json=json, params=params)


def decode_claims_unverified(token: str) -> Optional[dict[str, str]]:
    """
    Read {id, email} from a token without checking its signature.

    For display only (e.g. restoring who is logged in). Never use the
    result for an authorization decision.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return None
    if isinstance(claims.get("sub"), str) and isinstance(claims.get("email"), str):
        return {"id": claims["sub"], "email": claims["email"]}
    return None


def _unwrap(response: httpx.Response) -> Any:
    if response.status_code == 204:
        return None
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    if not response.is_success:
        message = (payload.get("error") or {}).get("message") if isinstance(payload, dict) else None
        raise ApiError(response.status_code, message or response.reason_phrase)
    return payload.get("data")


class TodoApiClient:
    """
    Talks to the identity service and the todo service.

    identity and todos are httpx clients with their base_url set to the
    respective service.
    """

    def __init__(self, identity: httpx.Client, todos: httpx.Client, session: Optional[ApiSession] = None):
        self.identity = identity
        self.todos = todos
        self.session = session

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    def register(self, email: str, password: str) -> dict:
        request = build_request(self.identity, "POST", "/api/auth/register",
                                json={"email": email, "password": password})
        return _unwrap(self.identity.send(request))

    def login(self, email: str, password: str) -> ApiSession:
        request = build_request(self.identity, "POST", "/api/auth/login",
                                json={"email": email, "password": password})
        data = _unwrap(self.identity.send(request))
        self.session = ApiSession(token=data["token"], user_id=data["user"]["id"], email=data["user"]["email"])
        logger.info(f"Logged in as {self.session.email}")
        return self.session

    def logout(self) -> None:
        self.session = None

    def _send_authenticated(self, method: str, url: str, json: Any = None, params: Optional[dict] = None) -> Any:
        if self.session is None:
            raise NotAuthenticatedError()
        request = build_request(self.todos, method, url, token=self.session.token, json=json, params=params)
        return _unwrap(self.todos.send(request))

    def list_todos(self, status: str = "all") -> list[dict]:
        return self._send_authenticated("GET", "/api/todos", params={"status": status})

    def create_todo(self, content: str, completed: bool = False) -> dict:
        return self._send_authenticated("POST", "/api/todos", json={"content": content, "completed": completed})

    def update_todo(self, todo_id: str, content: Optional[str] = None, completed: Optional[bool] = None) -> dict:
        body: dict[str, Any] = {}
        if content is not None:
            body["content"] = content
        if completed is not None:
            body["completed"] = completed
        return self._send_authenticated("PUT", f"/api/todos/{todo_id}", json=body)

    def delete_todo(self, todo_id: str) -> None:
        self._send_authenticated("DELETE", f"/api/todos/{todo_id}")
