"""Core domain models for workspace sections, items and their annotations."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .ids import get_entity_id


class FileType(str, Enum):
    """Display bucket for a section attachment."""
    IMAGE = "image"
    DOCUMENT = "document"
    OTHER = "other"


class ItemType(str, Enum):
    IMAGE = "image"
    FILE = "file"
    LINK = "link"
    PRODUCT = "product"


class ReactionType(str, Enum):
    LIKE = "like"
    LOVE = "love"
    APPROVED = "approved"


class WorkspaceModel(BaseModel):
    """Base for models exchanged with the API as camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the camelCase body the API expects."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class Entity(WorkspaceModel):
    """A model identified by an ``id`` (or ``_id`` on the wire)."""

    id: str

    @model_validator(mode="before")
    @classmethod
    def _resolve_id(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and ("id" in data or "_id" in data):
            data = dict(data)
            data["id"] = get_entity_id(data)
            data.pop("_id", None)
        return data


class Attachment(Entity):
    """File bound directly to a section."""
    file_name: str
    file_url: str
    file_type: FileType = FileType.OTHER
    file_size: Optional[int] = Field(None, ge=0)
    uploaded_at: Optional[datetime] = None


class Reaction(WorkspaceModel):
    """A single user's sentiment mark on an item."""
    type: ReactionType
    user_id: str
    user_name: str = ""


class Comment(Entity):
    user_id: str
    user_name: str = ""
    user_avatar: Optional[str] = None
    content: str
    created_at: Optional[datetime] = None


class Item(Entity):
    """A piece of shared content inside a section."""

    title: str
    description: Optional[str] = None
    type: ItemType

    # image / file / product
    file_url: Optional[str] = None
    # link / product
    link_url: Optional[str] = None
    # product only
    price: Optional[float] = None
    currency: Optional[str] = None
    store_name: Optional[str] = None
    store_address: Optional[str] = None

    reactions: List[Reaction] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    @field_validator("reactions", "comments", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def reaction_counts(self) -> Dict[ReactionType, int]:
        counts: Dict[ReactionType, int] = {t: 0 for t in ReactionType}
        for reaction in self.reactions:
            counts[reaction.type] += 1
        return counts

    def reaction_of(self, user_id: str) -> Optional[Reaction]:
        """Return the reaction ``user_id`` left on this item, if any."""
        for reaction in self.reactions:
            if reaction.user_id == user_id:
                return reaction
        return None


class Section(Entity):
    """Named grouping of items and attachments within a workspace."""

    title: str
    description: Optional[str] = None
    attachments: List[Attachment] = Field(default_factory=list)
    items: List[Item] = Field(default_factory=list)
    # Local UI state; never sent to the server.
    is_expanded: bool = Field(False, exclude=True)
    created_at: Optional[datetime] = None

    @field_validator("attachments", "items", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def find_item(self, item_id: str) -> Optional[Item]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    @property
    def image_attachments(self) -> List[Attachment]:
        return [a for a in self.attachments if a.file_type == FileType.IMAGE]

    @property
    def document_attachments(self) -> List[Attachment]:
        return [a for a in self.attachments if a.file_type != FileType.IMAGE]
