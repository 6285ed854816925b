"""Request and response bodies for the auth HTTP surface.

Request models only enforce presence; format rules (username pattern,
email shape, password byte length) live in the auth service so that every
caller gets them, not just the HTTP handlers.
"""

from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BaseModel, Field, StringConstraints
from pydantic import ValidationError as PydanticValidationError

from shared.auth.errors import ValidationError
from shared.auth.models import AccountView

MISSING_FIELDS_MESSAGE = "Missing fields"

_PRESENCE_ERROR_TYPES = {"missing", "string_too_short"}

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def _is_absent(error: Mapping[str, Any]) -> bool:
    # JSON null counts as an absent field
    return error["type"] in _PRESENCE_ERROR_TYPES or error.get("input", ...) is None


class RegisterRequest(BaseModel, frozen=True):
    name: RequiredText
    username: RequiredText
    email: RequiredText
    password: str = Field(min_length=1, repr=False)


class LoginRequest(BaseModel, frozen=True):
    email: RequiredText
    password: str = Field(min_length=1, repr=False)


class RegisterResponse(BaseModel, frozen=True):
    message: str
    user: AccountView


class LoginResponse(BaseModel, frozen=True):
    token: str
    user: AccountView


def parse_request[T: BaseModel](model: type[T], body: object) -> T:
    """Validate a decoded JSON body against a request model.

    Raises the auth ``ValidationError`` with "Missing fields" when a field is
    absent or empty, and a generic message for any other shape problem.
    """
    if not isinstance(body, dict):
        raise ValidationError("Invalid request body")
    try:
        return model.model_validate(body)
    except PydanticValidationError as exc:
        if any(_is_absent(err) for err in exc.errors()):
            raise ValidationError(MISSING_FIELDS_MESSAGE) from exc
        raise ValidationError("Invalid request body") from exc
