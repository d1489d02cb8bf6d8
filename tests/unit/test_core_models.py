"""Unit tests for workspace data models."""

import pytest
from pydantic import ValidationError

from pws.core.models import (
    Attachment,
    Comment,
    FileType,
    Item,
    ItemType,
    Reaction,
    ReactionType,
    Section,
)


class TestSectionModel:
    """Tests for Section parsing from API payloads."""

    def test_parse_wire_payload(self) -> None:
        section = Section.model_validate(
            {
                "_id": "sec-1",
                "title": "Kitchen Materials",
                "description": "Tiles and fixtures",
                "attachments": [
                    {
                        "_id": "att-1",
                        "fileName": "plan.pdf",
                        "fileUrl": "https://cdn.test/plan.pdf",
                        "fileType": "document",
                        "fileSize": 2048,
                        "uploadedAt": "2025-01-10T08:00:00Z",
                    }
                ],
                "items": [{"id": "item-1", "title": "Tile", "type": "image"}],
                "createdAt": "2025-01-10T08:00:00Z",
            }
        )
        assert section.id == "sec-1"
        assert section.attachments[0].file_type == FileType.DOCUMENT
        assert section.attachments[0].file_size == 2048
        assert section.items[0].type == ItemType.IMAGE
        assert section.items[0].reactions == []
        assert section.is_expanded is False

    def test_null_collections_become_empty(self) -> None:
        section = Section.model_validate({"_id": "s", "title": "T", "items": None, "attachments": None})
        assert section.items == []
        assert section.attachments == []

    def test_is_expanded_not_serialized(self) -> None:
        section = Section(id="s", title="T", is_expanded=True)
        assert "isExpanded" not in section.to_payload()
        assert "is_expanded" not in section.model_dump()

    def test_missing_title_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Section.model_validate({"_id": "s"})

    def test_image_and_document_grouping(self) -> None:
        section = Section(
            id="s",
            title="T",
            attachments=[
                Attachment(id="a", file_name="a.png", file_url="u", file_type=FileType.IMAGE),
                Attachment(id="b", file_name="b.pdf", file_url="u", file_type=FileType.DOCUMENT),
                Attachment(id="c", file_name="c.zip", file_url="u", file_type=FileType.OTHER),
            ],
        )
        assert [a.id for a in section.image_attachments] == ["a"]
        assert [a.id for a in section.document_attachments] == ["b", "c"]


class TestAttachmentModel:
    def test_payload_is_camel_case(self) -> None:
        attachment = Attachment(
            id="temp-1", file_name="plan.pdf", file_url="https://cdn.test/plan.pdf", file_type=FileType.DOCUMENT
        )
        assert attachment.to_payload() == {
            "id": "temp-1",
            "fileName": "plan.pdf",
            "fileUrl": "https://cdn.test/plan.pdf",
            "fileType": "document",
        }

    def test_negative_size_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Attachment(id="a", file_name="x", file_url="u", file_size=-1)


class TestItemModel:
    """Tests for Item helpers."""

    def _item(self) -> Item:
        return Item(
            id="item-1",
            title="Oak floor",
            type=ItemType.PRODUCT,
            price=45.5,
            currency="GEL",
            store_name="Domino",
            reactions=[
                Reaction(type=ReactionType.LIKE, user_id="u1", user_name="A"),
                Reaction(type=ReactionType.LIKE, user_id="u2", user_name="B"),
                Reaction(type=ReactionType.APPROVED, user_id="u3", user_name="C"),
            ],
            comments=[Comment(id="c1", user_id="u1", content="Nice")],
        )

    def test_reaction_counts(self) -> None:
        counts = self._item().reaction_counts()
        assert counts[ReactionType.LIKE] == 2
        assert counts[ReactionType.LOVE] == 0
        assert counts[ReactionType.APPROVED] == 1

    def test_reaction_of(self) -> None:
        item = self._item()
        assert item.reaction_of("u3").type == ReactionType.APPROVED
        assert item.reaction_of("nobody") is None

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Item.model_validate({"_id": "i", "title": "x", "type": "video"})

    def test_unknown_reaction_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Reaction.model_validate({"type": "dislike", "userId": "u"})
