# users_api/schemas.py
import re
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


# Characters XML 1.0 cannot carry; such text could not be rendered as XML.
XML_ILLEGAL = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserDto(CamelModel):
    id: UUID
    login: str
    full_name: str
    games_played: int
    current_game_id: Optional[UUID] = None


class EditableUserFields(CamelModel):
    first_name: str
    last_name: str
    games_played: int = 0
    current_game_id: Optional[UUID] = None

    @field_validator("*", mode="before")
    @classmethod
    def check_text(cls, value, info):
        field = cls.model_fields[info.field_name]
        if field.is_required() and (value is None or (isinstance(value, str) and not value.strip())):
            raise ValueError(f"The {field.alias} field is required.")
        if isinstance(value, str) and XML_ILLEGAL.search(value):
            raise ValueError(f"The {field.alias} field contains characters that are not allowed.")
        return value


class PostUserDto(EditableUserFields):
    login: str


class UpdateUserDto(EditableUserFields):

    @classmethod
    def draft(cls) -> dict:
        """Blank document a patch is applied to: required fields unset, the rest at their defaults."""
        return {
            f.alias: None if f.is_required() else f.default
            for f in cls.model_fields.values()
        }


class PaginationHeader(CamelModel):
    previous_page_link: Optional[str] = None
    next_page_link: Optional[str] = None
    total_count: int
    page_size: int
    current_page: int
    total_pages: int
