"""HTTP client for the hub server's auth and profile endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import pydantic

from hubclient.models import LoginReply, RegisterReply, RemoteAccount

if TYPE_CHECKING:
    from pydantic import BaseModel

DEFAULT_TIMEOUT_SECONDS = 10.0


class ApiError(Exception):
    """Non-2xx response, timeout, or transport failure.

    ``status_code`` is None when no response was received.
    """

    def __init__(self, status_code: int | None, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class HubApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def register(self, *, name: str, username: str, email: str, password: str) -> RegisterReply:
        data = await self._request(
            "POST",
            "/api/auth/register",
            json={"name": name, "username": username, "email": email, "password": password},
        )
        return _parse(RegisterReply, data)

    async def login(self, email: str, password: str) -> LoginReply:
        data = await self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        return _parse(LoginReply, data)

    async def me(self, token: str) -> RemoteAccount:
        data = await self._request("GET", "/api/user/me", token=token)
        return _parse(RemoteAccount, data)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        token: str | None = None,
    ) -> Any:  # noqa: ANN401
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.request(method, path, json=json, headers=headers)
            except httpx.TimeoutException as e:
                raise ApiError(None, "Request timed out") from e
            except httpx.RequestError as e:
                raise ApiError(None, f"Failed to connect to hub server: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            raise ApiError(response.status_code, _error_message(response, data))
        return data


def _error_message(response: httpx.Response, data: Any) -> str:  # noqa: ANN401
    """Prefer the server's ``{"error": ...}`` message, then the raw body."""
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return response.text or f"Request failed with status {response.status_code}"


def _parse[T: BaseModel](model: type[T], data: Any) -> T:  # noqa: ANN401
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ApiError(None, "Unexpected response from hub server") from e
