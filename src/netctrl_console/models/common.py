"""Common Pydantic models shared across netctrl resources."""

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from netctrl_console.utils.errors import DecodeError


class WireModel(BaseModel):
    """Base for every model exchanged with netctrl-server.

    The server speaks camelCase (``createdAt``, ``ipAddress``); the rest of
    the package uses the snake_case attribute names. Both spellings are
    accepted on input, and ``to_wire()`` emits camelCase.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self, exclude_unset: bool = False) -> dict[str, Any]:
        """Serialize for a request body, dropping fields that are None."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            exclude_unset=exclude_unset,
        )


# Fields the server assigns; never sent back on create or update
SERVER_OWNED_FIELDS = frozenset({"id", "created_at", "updated_at"})

ModelT = TypeVar("ModelT", bound=WireModel)


def decode(model: type[ModelT], data: Any, what: str) -> ModelT:
    """Validate a response body against ``model``.

    Raises:
        DecodeError: If the body does not match the expected shape.
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise DecodeError(f"Unexpected {what} response: {e}") from e
