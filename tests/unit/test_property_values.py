"""Tests for typed property values and their Notion rendering."""
from datetime import datetime

import pytest

from kapture.errors import InvalidPropertyData
from kapture.models.properties import (
    CheckboxValue,
    DateValue,
    EmailValue,
    MultiSelectValue,
    NumberValue,
    PeopleValue,
    PhoneNumberValue,
    PropertyKind,
    RichTextValue,
    SelectValue,
    TitleValue,
    UrlValue,
    decode_properties,
    encode_properties,
    to_notion_properties,
)


class TestToNotion:
    def test_title(self):
        assert TitleValue(text="Test Title").to_notion() == {
            "title": [{"text": {"content": "Test Title"}}]
        }

    def test_rich_text(self):
        assert RichTextValue(text="note").to_notion() == {
            "rich_text": [{"text": {"content": "note"}}]
        }

    def test_number(self):
        assert NumberValue(value=42.5).to_notion() == {"number": 42.5}

    def test_number_without_value_sends_zero(self):
        assert NumberValue().to_notion() == {"number": 0}

    def test_date(self):
        rendered = DateValue(value=datetime(2025, 3, 1, 9, 30)).to_notion()
        assert rendered == {"date": {"start": "2025-03-01T09:30:00"}}

    def test_date_without_value_is_empty(self):
        assert DateValue().to_notion() == {}

    def test_select(self):
        assert SelectValue(name="High").to_notion() == {"select": {"name": "High"}}

    def test_multi_select(self):
        rendered = MultiSelectValue(names=["Tag1", "Tag2"]).to_notion()
        assert rendered == {"multi_select": [{"name": "Tag1"}, {"name": "Tag2"}]}

    def test_checkbox(self):
        assert CheckboxValue(checked=True).to_notion() == {"checkbox": True}

    def test_url_email_phone(self):
        assert UrlValue(url="https://example.com").to_notion() == {"url": "https://example.com"}
        assert EmailValue(email="a@b.c").to_notion() == {"email": "a@b.c"}
        assert PhoneNumberValue(phone="555").to_notion() == {"phone_number": "555"}

    def test_people(self):
        assert PeopleValue(user_ids=["u1"]).to_notion() == {"people": [{"id": "u1"}]}

    def test_to_notion_properties_drops_empty(self):
        rendered = to_notion_properties(
            {"title": TitleValue(text="x"), "Due": DateValue()}
        )
        assert list(rendered) == ["title"]


class TestEncoding:
    def test_preserves_order_and_kinds(self):
        props = {
            "b": CheckboxValue(checked=True),
            "a": TitleValue(text="first"),
            "c": MultiSelectValue(names=["x"]),
        }
        decoded = decode_properties(encode_properties(props))
        assert list(decoded) == ["b", "a", "c"]
        assert isinstance(decoded["b"], CheckboxValue)
        assert isinstance(decoded["c"], MultiSelectValue)

    def test_unknown_kind_rejected(self):
        with pytest.raises(InvalidPropertyData):
            decode_properties('{"x": {"kind": "formula", "value": 1}}')

    def test_invalid_json_rejected(self):
        with pytest.raises(InvalidPropertyData):
            decode_properties("not json")


class TestPropertyKind:
    @pytest.mark.parametrize("kind", ["formula", "rollup", "created_time", "last_edited_by"])
    def test_computed_kinds_not_editable(self, kind):
        assert not PropertyKind(kind).is_editable

    @pytest.mark.parametrize("kind", ["title", "select", "date", "checkbox"])
    def test_input_kinds_editable(self, kind):
        assert PropertyKind(kind).is_editable

    def test_unknown_type_parses_as_unsupported(self):
        assert PropertyKind.parse("button") == PropertyKind.UNSUPPORTED
