"""Unit tests for section and item request bodies."""

import pytest

from pws.collab.forms import build_item_fields, build_section_fields
from pws.core.errors import ValidationError
from pws.core.models import Attachment, FileType, ItemType


class TestBuildSectionFields:
    def test_title_trimmed(self) -> None:
        assert build_section_fields("  Kitchen Materials ") == {"title": "Kitchen Materials"}

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_blank_title_rejected(self, title) -> None:
        with pytest.raises(ValidationError):
            build_section_fields(title)

    def test_attachments_serialized(self) -> None:
        attachment = Attachment(id="temp-1", file_name="a.png", file_url="https://cdn/a.png", file_type=FileType.IMAGE)
        fields = build_section_fields("Kitchen", " Tiles ", [attachment])
        assert fields["description"] == "Tiles"
        assert fields["attachments"][0]["fileName"] == "a.png"
        assert "id" not in fields["attachments"][0]

    def test_saved_attachment_keeps_id(self) -> None:
        attachment = Attachment(id="65a1f", file_name="a.png", file_url="https://cdn/a.png")
        fields = build_section_fields("Kitchen", None, [attachment])
        assert fields["attachments"][0]["id"] == "65a1f"

    def test_empty_attachment_list_kept(self) -> None:
        assert build_section_fields("Kitchen", None, [])["attachments"] == []


class TestBuildItemFields:
    """Tests for type-dependent item fields."""

    def test_image_keeps_file_url_only(self) -> None:
        fields = build_item_fields(
            "image", "Tile", file_url="https://cdn/t.jpg", link_url="https://ignored", price="10"
        )
        assert fields == {"type": "image", "title": "Tile", "fileUrl": "https://cdn/t.jpg"}

    def test_link_keeps_link_url_only(self) -> None:
        fields = build_item_fields(ItemType.LINK, "Idea", link_url="https://pin.test/1", file_url="x")
        assert fields == {"type": "link", "title": "Idea", "linkUrl": "https://pin.test/1"}

    def test_product_fields(self) -> None:
        fields = build_item_fields(
            ItemType.PRODUCT,
            " Oak floor ",
            description="  ",
            link_url="https://shop.test/oak",
            price="45.50",
            currency="GEL",
            store_name="Domino",
            store_address="",
        )
        assert fields == {
            "type": "product",
            "title": "Oak floor",
            "linkUrl": "https://shop.test/oak",
            "price": 45.5,
            "currency": "GEL",
            "storeName": "Domino",
        }

    def test_blank_title_rejected(self) -> None:
        with pytest.raises(ValidationError):
            build_item_fields(ItemType.FILE, " ")

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            build_item_fields("video", "Clip")

    @pytest.mark.parametrize("price", ["abc", -1])
    def test_bad_price_rejected(self, price) -> None:
        with pytest.raises(ValidationError):
            build_item_fields(ItemType.PRODUCT, "Sink", price=price)
