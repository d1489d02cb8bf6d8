"""Collaborative workspace state management.

This module provides the in-memory state of one project's workspace as
seen by one user. The manager applies create/update/delete, reaction and
comment operations through the workspace repository and folds the
server's answer into its section tree. Local state only changes after
the server confirmed an operation; failures are turned into
notifications instead of being raised to the caller.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import AsyncIterator, Callable, Dict, List, Optional, Sequence, Set, Tuple, Union

from pydantic import BaseModel, Field

from ..api.base import WorkspaceRepository
from ..attachments.classify import classify_file_type, validate_before_after_pair, validate_upload
from ..config.settings import settings
from ..core.errors import (
    NotFoundError,
    OperationInProgress,
    PermissionDenied,
    ValidationError,
    WorkspaceError,
)
from ..core.ids import generate_temp_id
from ..core.models import Attachment, Item, ReactionType, Section
from ..utils.logging import get_logger
from . import reconcile
from .forms import build_section_fields, require_text
from .roles import Operation, WorkspaceSession

logger = get_logger(__name__)

# (filename, content, content_type)
UploadFile = Tuple[str, bytes, Optional[str]]


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class Notification(BaseModel):
    """User-visible outcome of a workspace operation."""

    level: NotificationLevel
    message: str
    operation: str
    retryable: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class WorkspaceStateManager:
    """Container for one project's workspace as seen by one session."""

    def __init__(
        self,
        job_id: str,
        session: WorkspaceSession,
        repository: WorkspaceRepository,
        preserve_expansion: Optional[bool] = None,
        on_notify: Optional[Callable[[Notification], None]] = None,
    ) -> None:
        self.job_id = job_id
        self.session = session
        self.repository = repository
        self.preserve_expansion = (
            settings.preserve_expansion_on_load if preserve_expansion is None else preserve_expansion
        )
        self.on_notify = on_notify
        self.sections: List[Section] = []
        self.notifications: List[Notification] = []
        self.loaded = False
        self._drafts: Dict[str, str] = {}
        self._pending: Set[str] = set()
        # bumped whenever a confirmed mutation changes the tree
        self._revision = 0

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    @property
    def total_items(self) -> int:
        return sum(len(s.items) for s in self.sections)

    def find_section(self, section_id: str) -> Optional[Section]:
        return reconcile.find_section(self.sections, section_id)

    def find_item(self, section_id: str, item_id: str) -> Optional[Item]:
        return reconcile.find_item(self.sections, section_id, item_id)

    def is_pending(self, key: str) -> bool:
        """Whether the operation identified by ``key`` awaits a response.

        Callers use this to disable the control that triggers it.
        """
        return key in self._pending

    @asynccontextmanager
    async def _in_flight(self, key: str) -> AsyncIterator[None]:
        if key in self._pending:
            raise OperationInProgress("This action is already in progress")
        self._pending.add(key)
        try:
            yield
        finally:
            self._pending.discard(key)

    def _commit(self, sections: List[Section]) -> None:
        self.sections = sections
        self._revision += 1

    def _require(self, operation: Operation) -> None:
        if not self.session.can(operation):
            raise PermissionDenied(
                f"Role '{self.session.role.value}' may not {operation.value.replace('_', ' ')}"
            )

    def _require_section(self, section_id: str) -> Section:
        section = self.find_section(section_id)
        if section is None:
            raise ValidationError(f"Unknown section: {section_id}")
        return section

    def _require_item(self, section_id: str, item_id: str) -> Item:
        item = self._require_section(section_id).find_item(item_id)
        if item is None:
            raise ValidationError(f"Unknown item: {item_id}")
        return item

    def _notify(self, notification: Notification) -> None:
        self.notifications.append(notification)
        if self.on_notify is not None:
            self.on_notify(notification)

    def _succeed(self, operation: str, message: str) -> None:
        logger.info(message, extra={"job_id": self.job_id, "operation": operation})
        self._notify(Notification(level=NotificationLevel.SUCCESS, message=message, operation=operation))

    def _fail(self, operation: str, error: WorkspaceError) -> None:
        logger.warning(
            f"{operation} failed: {error.message}",
            extra={"job_id": self.job_id, "error_type": error.error_type.value},
        )
        self._notify(
            Notification(
                level=NotificationLevel.ERROR,
                message=error.message,
                operation=operation,
                retryable=error.retryable,
            )
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> bool:
        """Replace the local tree with the server's workspace.

        A missing workspace (404) loads as an empty one. On any other
        failure the current tree is kept and ``False`` is returned.

        A snapshot is only installed if no mutation was confirmed while it
        was in flight; otherwise it is fetched again, up to
        ``settings.max_retries`` more times.
        """
        try:
            self._require(Operation.VIEW)
            async with self._in_flight("load"):
                for _ in range(settings.max_retries + 1):
                    revision = self._revision
                    try:
                        sections = await self.repository.fetch_workspace(self.job_id)
                    except NotFoundError:
                        logger.info("No workspace yet", extra={"job_id": self.job_id})
                        sections = []
                    if revision == self._revision:
                        break
                    logger.info(
                        "Workspace changed while loading, fetching again", extra={"job_id": self.job_id}
                    )
                else:
                    logger.warning("Discarded stale workspace snapshot", extra={"job_id": self.job_id})
                    return False
        except WorkspaceError as e:
            self._fail("load", e)
            return False
        self.sections = reconcile.replace_sections(self.sections, sections, self.preserve_expansion)
        self.loaded = True
        return True

    async def mark_materials_viewed(self) -> None:
        """Send a read receipt for the project's materials. Failures are ignored."""
        try:
            await self.repository.mark_materials_viewed(self.job_id)
        except WorkspaceError as e:
            logger.debug(f"Read receipt not recorded: {e.message}", extra={"job_id": self.job_id})

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    async def create_section(
        self,
        title: Optional[str],
        description: Optional[str] = None,
        attachments: Optional[Sequence[Attachment]] = None,
    ) -> Optional[Section]:
        try:
            self._require(Operation.CREATE_SECTION)
            fields = build_section_fields(title, description, attachments)
            async with self._in_flight("create_section"):
                section = await self.repository.create_section(self.job_id, fields)
        except WorkspaceError as e:
            self._fail("create_section", e)
            return None
        self._commit(reconcile.append_section(self.sections, section))
        self._succeed("create_section", "Section created")
        return self.find_section(section.id)

    async def update_section(
        self,
        section_id: str,
        title: Optional[str],
        description: Optional[str] = None,
        attachments: Optional[Sequence[Attachment]] = None,
    ) -> Optional[Section]:
        try:
            self._require(Operation.EDIT_SECTION)
            self._require_section(section_id)
            fields = build_section_fields(title, description, attachments)
            async with self._in_flight(f"section:{section_id}"):
                section = await self.repository.update_section(self.job_id, section_id, fields)
        except WorkspaceError as e:
            self._fail("update_section", e)
            return None
        self.apply_section(section)
        self._succeed("update_section", "Section saved")
        return self.find_section(section.id)

    def apply_section(self, section: Section) -> None:
        """Merge an authoritative section into local state."""
        self._commit(reconcile.merge_section(self.sections, section))

    async def delete_section(
        self, section_id: str, confirm: Optional[Callable[[Section], bool]] = None
    ) -> bool:
        """Delete a section and everything in it.

        ``confirm`` is asked first; a falsy answer cancels without a request.
        """
        try:
            self._require(Operation.DELETE_SECTION)
            section = self._require_section(section_id)
            if confirm is not None and not confirm(section):
                return False
            async with self._in_flight(f"section:{section_id}"):
                await self.repository.delete_section(self.job_id, section_id)
        except WorkspaceError as e:
            self._fail("delete_section", e)
            return False
        self._commit(reconcile.remove_section(self.sections, section_id))
        self._succeed("delete_section", "Section deleted")
        return True

    def toggle_section_expanded(self, section_id: str) -> Optional[bool]:
        """Flip a section's expansion locally. Returns the new state."""
        self.sections = reconcile.toggle_expanded(self.sections, section_id)
        section = self.find_section(section_id)
        return section.is_expanded if section else None

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    async def create_item(self, section_id: str, item_fields: Dict) -> Optional[Item]:
        """Create an item from a body built by ``forms.build_item_fields``."""
        try:
            self._require(Operation.CREATE_ITEM)
            self._require_section(section_id)
            require_text(item_fields.get("title"), "Item title")
            async with self._in_flight(f"section:{section_id}:items"):
                item = await self.repository.create_item(self.job_id, section_id, item_fields)
        except WorkspaceError as e:
            self._fail("create_item", e)
            return None
        if self.find_section(section_id) is None:
            self._fail("create_item", NotFoundError("The section was deleted before the item was added"))
            return None
        self._commit(reconcile.append_item(self.sections, section_id, item))
        self._succeed("create_item", "Item added")
        return self.find_item(section_id, item.id)

    async def delete_item(self, section_id: str, item_id: str) -> bool:
        try:
            self._require(Operation.DELETE_ITEM)
            self._require_item(section_id, item_id)
            async with self._in_flight(f"item:{item_id}"):
                await self.repository.delete_item(self.job_id, section_id, item_id)
        except WorkspaceError as e:
            self._fail("delete_item", e)
            return False
        self._commit(reconcile.remove_item(self.sections, section_id, item_id))
        self._succeed("delete_item", "Item deleted")
        return True

    # ------------------------------------------------------------------
    # Reactions and comments
    # ------------------------------------------------------------------

    async def react(
        self, section_id: str, item_id: str, reaction_type: Union[ReactionType, str]
    ) -> Optional[Item]:
        """Send a reaction; the item's reactions become the server's list."""
        try:
            self._require(Operation.REACT)
            try:
                reaction_type = ReactionType(reaction_type)
            except ValueError:
                raise ValidationError(f"Unknown reaction: {reaction_type!r}")
            self._require_item(section_id, item_id)
            async with self._in_flight(f"react:{item_id}"):
                reactions = await self.repository.add_reaction(
                    self.job_id, section_id, item_id, reaction_type
                )
        except WorkspaceError as e:
            self._fail("react", e)
            return None
        self._commit(reconcile.replace_reactions(self.sections, section_id, item_id, reactions))
        return self.find_item(section_id, item_id)

    def my_reaction(self, section_id: str, item_id: str) -> Optional[ReactionType]:
        """The reaction this session's user left on an item, if any."""
        item = self.find_item(section_id, item_id)
        reaction = item.reaction_of(self.session.user_id) if item else None
        return reaction.type if reaction else None

    def set_comment_draft(self, item_id: str, text: str) -> None:
        self._drafts[item_id] = text

    def comment_draft(self, item_id: str) -> str:
        return self._drafts.get(item_id, "")

    async def add_comment(
        self, section_id: str, item_id: str, content: Optional[str] = None
    ) -> Optional[Item]:
        """Post a comment, by default the item's current draft.

        The draft is cleared only once the server accepted the comment.
        """
        if content is None:
            content = self.comment_draft(item_id)
        try:
            self._require(Operation.COMMENT)
            text = require_text(content, "Comment")
            self._require_item(section_id, item_id)
            async with self._in_flight(f"comment:{item_id}"):
                comments = await self.repository.add_comment(self.job_id, section_id, item_id, text)
        except WorkspaceError as e:
            self._fail("add_comment", e)
            return None
        self._commit(reconcile.replace_comments(self.sections, section_id, item_id, comments))
        if self._drafts.get(item_id) == content:
            del self._drafts[item_id]
        return self.find_item(section_id, item_id)

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    async def _upload_attachment(self, filename: str, content: bytes, content_type: Optional[str]) -> Attachment:
        validate_upload(filename, len(content), content_type)
        result = await self.repository.upload(filename, content, content_type, public=True)
        return Attachment(
            id=generate_temp_id(),
            file_name=filename,
            file_url=result.url,
            file_type=classify_file_type(filename),
            file_size=len(content),
            uploaded_at=datetime.now(timezone.utc),
        )

    async def upload_section_attachment(
        self, filename: str, content: bytes, content_type: Optional[str] = None
    ) -> Optional[Attachment]:
        """Upload a file for a section form.

        The returned attachment carries a temporary id until it is saved
        with ``create_section`` or ``update_section``.
        """
        try:
            self._require(Operation.EDIT_SECTION)
            attachment = await self._upload_attachment(filename, content, content_type)
        except WorkspaceError as e:
            self._fail("upload", e)
            return None
        return attachment

    async def upload_before_after_pair(
        self, files: Sequence[UploadFile]
    ) -> Optional[Tuple[Attachment, Attachment]]:
        """Upload a before/after image pair. Both files are checked before either is sent."""
        try:
            self._require(Operation.EDIT_SECTION)
            validate_before_after_pair([f[0] for f in files])
            for filename, content, content_type in files:
                validate_upload(filename, len(content), content_type)
            before = await self._upload_attachment(*files[0])
            after = await self._upload_attachment(*files[1])
        except WorkspaceError as e:
            self._fail("upload", e)
            return None
        return before, after

    async def upload_item_file(
        self, filename: str, content: bytes, content_type: Optional[str] = None
    ) -> Optional[str]:
        """Upload the file behind an image/file/product item and return its URL."""
        try:
            self._require(Operation.CREATE_ITEM)
            validate_upload(filename, len(content), content_type)
            result = await self.repository.upload(filename, content, content_type)
        except WorkspaceError as e:
            self._fail("upload", e)
            return None
        return result.url
