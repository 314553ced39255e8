"""Base class for JSON request forms."""

from __future__ import annotations

from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from ..errors import RequestValidationError

FormT = TypeVar("FormT", bound="RequestForm")


def validation_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Flatten pydantic errors into a field -> messages map."""

    structured: dict[str, list[str]] = {}
    for error in exc.errors(include_url=False):
        loc = error.get("loc", ())
        key = str(loc[0]) if loc else "__root__"
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        structured.setdefault(key, []).append(message)
    return structured


class RequestForm(BaseModel):
    """Accepts camelCase or snake_case keys; services get snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    @classmethod
    def parse(cls: type[FormT], payload: Mapping[str, Any] | None) -> FormT:
        try:
            return cls.model_validate(dict(payload or {}))
        except ValidationError as exc:
            errors = validation_errors(exc)
            first = next(iter(errors.values()), ["Invalid request"])[0]
            raise RequestValidationError(first, details=errors) from exc

    def to_data(self) -> dict[str, Any]:
        """Only the fields the client sent."""

        return self.model_dump(exclude_unset=True)


__all__ = ["RequestForm", "validation_errors"]
