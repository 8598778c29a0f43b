"""
Typed property values for captured entries.

Each Notion property type a capture may write has its own value model,
discriminated on ``kind``. A property map is an ordered mapping from the
destination's property id to one of these values:

    {
        "title": TitleValue(text="Buy milk"),
        "Due": DateValue(value=datetime(2025, 3, 1, 9, 0)),
        "Tags": MultiSelectValue(names=["home", "errand"]),
    }

Entries store the map as JSON (each value dumped with its ``kind``) so the
queue never depends on the remote's wire format. ``to_notion()`` renders the
Notion API shape only at delivery time.
"""
import json
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from kapture.errors import InvalidPropertyData


class PropertyKind(str, Enum):
    """Notion property types. Only some are writable by a capture."""

    TITLE = "title"
    RICH_TEXT = "rich_text"
    NUMBER = "number"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    DATE = "date"
    PEOPLE = "people"
    FILES = "files"
    CHECKBOX = "checkbox"
    URL = "url"
    EMAIL = "email"
    PHONE_NUMBER = "phone_number"
    FORMULA = "formula"
    RELATION = "relation"
    ROLLUP = "rollup"
    CREATED_TIME = "created_time"
    CREATED_BY = "created_by"
    LAST_EDITED_TIME = "last_edited_time"
    LAST_EDITED_BY = "last_edited_by"
    STATUS = "status"
    UNSUPPORTED = "unsupported"

    @classmethod
    def parse(cls, raw: str) -> "PropertyKind":
        try:
            return cls(raw)
        except ValueError:
            return cls.UNSUPPORTED

    @property
    def is_editable(self) -> bool:
        # Computed by Notion itself
        return self not in {
            PropertyKind.FORMULA,
            PropertyKind.CREATED_TIME,
            PropertyKind.CREATED_BY,
            PropertyKind.LAST_EDITED_TIME,
            PropertyKind.LAST_EDITED_BY,
            PropertyKind.ROLLUP,
        }


def _rich_text(text: str) -> List[Dict[str, Any]]:
    return [{"text": {"content": text}}]


class TitleValue(BaseModel):
    kind: Literal["title"] = "title"
    text: str = ""

    def to_notion(self) -> Dict[str, Any]:
        return {"title": _rich_text(self.text)}


class RichTextValue(BaseModel):
    kind: Literal["rich_text"] = "rich_text"
    text: str = ""

    def to_notion(self) -> Dict[str, Any]:
        return {"rich_text": _rich_text(self.text)}


class NumberValue(BaseModel):
    kind: Literal["number"] = "number"
    value: Optional[float] = None

    def to_notion(self) -> Dict[str, Any]:
        return {"number": self.value if self.value is not None else 0}


class DateValue(BaseModel):
    kind: Literal["date"] = "date"
    value: Optional[datetime] = None

    def to_notion(self) -> Dict[str, Any]:
        if self.value is None:
            return {}
        return {"date": {"start": self.value.isoformat()}}


class SelectValue(BaseModel):
    kind: Literal["select"] = "select"
    name: Optional[str] = None

    def to_notion(self) -> Dict[str, Any]:
        return {"select": {"name": self.name or ""}}


class MultiSelectValue(BaseModel):
    kind: Literal["multi_select"] = "multi_select"
    names: List[str] = Field(default_factory=list)

    def to_notion(self) -> Dict[str, Any]:
        return {"multi_select": [{"name": n} for n in self.names]}


class CheckboxValue(BaseModel):
    kind: Literal["checkbox"] = "checkbox"
    checked: bool = False

    def to_notion(self) -> Dict[str, Any]:
        return {"checkbox": self.checked}


class UrlValue(BaseModel):
    kind: Literal["url"] = "url"
    url: str = ""

    def to_notion(self) -> Dict[str, Any]:
        return {"url": self.url}


class EmailValue(BaseModel):
    kind: Literal["email"] = "email"
    email: str = ""

    def to_notion(self) -> Dict[str, Any]:
        return {"email": self.email}


class PhoneNumberValue(BaseModel):
    kind: Literal["phone_number"] = "phone_number"
    phone: str = ""

    def to_notion(self) -> Dict[str, Any]:
        return {"phone_number": self.phone}


class PeopleValue(BaseModel):
    kind: Literal["people"] = "people"
    user_ids: List[str] = Field(default_factory=list)

    def to_notion(self) -> Dict[str, Any]:
        return {"people": [{"id": uid} for uid in self.user_ids]}


PropertyValue = Annotated[
    Union[
        TitleValue,
        RichTextValue,
        NumberValue,
        DateValue,
        SelectValue,
        MultiSelectValue,
        CheckboxValue,
        UrlValue,
        EmailValue,
        PhoneNumberValue,
        PeopleValue,
    ],
    Field(discriminator="kind"),
]

PropertyMap = Dict[str, PropertyValue]

_MAP_ADAPTER = TypeAdapter(PropertyMap)


def encode_properties(properties: Mapping[str, PropertyValue]) -> str:
    """Serialize a property map to JSON text, preserving key order."""
    return json.dumps(
        {pid: value.model_dump(mode="json") for pid, value in properties.items()}
    )


def decode_properties(raw: str) -> PropertyMap:
    """Parse JSON text produced by encode_properties().

    Raises:
        InvalidPropertyData: if the text is not valid JSON or a value has an
            unknown kind / wrong shape.
    """
    try:
        return _MAP_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise InvalidPropertyData(f"Stored properties are not decodable: {exc}") from exc


def to_notion_properties(properties: Mapping[str, PropertyValue]) -> Dict[str, Any]:
    """Render a property map in Notion API format, dropping empty renderings."""
    rendered: Dict[str, Any] = {}
    for pid, value in properties.items():
        notion = value.to_notion()
        if notion:
            rendered[pid] = notion
    return rendered
