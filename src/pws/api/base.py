"""Base classes and interfaces for the workspace repository."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ..core.models import Comment, Item, Reaction, ReactionType, Section


class UploadResult(BaseModel):
    """Location of a file accepted by the upload service."""
    url: str
    filename: Optional[str] = None


class WorkspaceRepository(ABC):
    """Remote source of truth for a project's workspace.

    Implementations raise ``pws.core.errors.WorkspaceError`` subclasses:
    ``NotFoundError`` when the workspace does not exist yet and
    ``NetworkOrServerError`` for any other failure.
    """

    @abstractmethod
    async def fetch_workspace(self, job_id: str) -> List[Section]:
        raise NotImplementedError

    @abstractmethod
    async def mark_materials_viewed(self, job_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def create_section(self, job_id: str, fields: Dict[str, Any]) -> Section:
        raise NotImplementedError

    @abstractmethod
    async def update_section(self, job_id: str, section_id: str, fields: Dict[str, Any]) -> Section:
        raise NotImplementedError

    @abstractmethod
    async def delete_section(self, job_id: str, section_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def create_item(self, job_id: str, section_id: str, fields: Dict[str, Any]) -> Item:
        raise NotImplementedError

    @abstractmethod
    async def delete_item(self, job_id: str, section_id: str, item_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def add_reaction(
        self, job_id: str, section_id: str, item_id: str, reaction_type: ReactionType
    ) -> List[Reaction]:
        """Send a reaction and return the item's full reaction list."""
        raise NotImplementedError

    @abstractmethod
    async def add_comment(
        self, job_id: str, section_id: str, item_id: str, content: str
    ) -> List[Comment]:
        """Send a comment and return the item's full comment list."""
        raise NotImplementedError

    @abstractmethod
    async def upload(
        self,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
        public: bool = False,
    ) -> UploadResult:
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources."""
        raise NotImplementedError

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
