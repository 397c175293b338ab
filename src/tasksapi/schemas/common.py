"""Shared schema pieces.

The wire format is camelCase (createdAt, nextCursor, currentPassword);
Python attributes stay snake_case. ApiModel wires that up once.
"""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from pydantic.networks import validate_email

from tasksapi.db.models import as_utc


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _check_email(value: str) -> str:
    # Validate only; the address is stored exactly as given.
    validate_email(value)
    return value


Email = Annotated[str, AfterValidator(_check_email)]
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class MessageResponse(ApiModel):
    message: str
