"""HTTP workspace repository backed by the marketplace REST API."""

from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from ..config.settings import settings
from ..core.errors import NetworkOrServerError, to_workspace_error
from ..core.ids import normalize_file_url
from ..core.models import Comment, Item, Reaction, ReactionType, Section
from ..utils.logging import get_logger
from .base import UploadResult, WorkspaceRepository

logger = get_logger(__name__)


class HttpWorkspaceRepository(WorkspaceRepository):
    """Workspace API client with timeouts, retrying reads and error mapping."""

    USER_AGENT = "ProjectWorkspace/0.1.0"

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.token = token if token is not None else settings.api_token
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.request_timeout,
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
            headers=self._build_headers(),
            transport=transport,
        )

    def _build_headers(self) -> Dict[str, str]:
        headers = {"User-Agent": self.USER_AGENT, "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @staticmethod
    def _workspace_path(job_id: str) -> str:
        return f"/jobs/projects/{job_id}/workspace"

    def _item_path(self, job_id: str, section_id: str, item_id: Optional[str] = None) -> str:
        path = f"{self._workspace_path(job_id)}/sections/{section_id}/items"
        return f"{path}/{item_id}" if item_id else path

    async def _send(
        self,
        method: str,
        path: str,
        action: str,
        json: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Any:
        logger.debug(f"{method} {path}", extra={"action": action})
        try:
            response = await self.client.request(method, path, json=json, files=files)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise to_workspace_error(e, action) from e
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise to_workspace_error(e, action) from e

    @retry(
        stop=stop_after_attempt(settings.max_retries),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=settings.retry_max_wait),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _get_json(self, path: str) -> Any:
        response = await self.client.get(path)
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _extract(data: Any, key: str, action: str) -> Any:
        if not isinstance(data, dict) or key not in data:
            raise NetworkOrServerError(f"{action} returned no '{key}' in response")
        return data[key]

    async def fetch_workspace(self, job_id: str) -> List[Section]:
        action = "Load workspace"
        path = self._workspace_path(job_id)
        logger.debug(f"GET {path}", extra={"action": action})
        try:
            data = await self._get_json(path)
            raw = data.get("sections") if isinstance(data, dict) else None
            sections = [Section.model_validate(s) for s in raw or []]
        except (httpx.HTTPError, ValueError) as e:
            raise to_workspace_error(e, action) from e
        logger.info("Workspace loaded", extra={"job_id": job_id, "sections": len(sections)})
        return sections

    async def mark_materials_viewed(self, job_id: str) -> None:
        await self._send("POST", f"/jobs/projects/{job_id}/materials/viewed", "Mark materials viewed")

    async def create_section(self, job_id: str, fields: Dict[str, Any]) -> Section:
        action = "Create section"
        data = await self._send("POST", f"{self._workspace_path(job_id)}/sections", action, json=fields)
        return self._parse(Section, self._extract(data, "section", action), action)

    async def update_section(self, job_id: str, section_id: str, fields: Dict[str, Any]) -> Section:
        action = "Update section"
        data = await self._send(
            "PATCH", f"{self._workspace_path(job_id)}/sections/{section_id}", action, json=fields
        )
        return self._parse(Section, self._extract(data, "section", action), action)

    async def delete_section(self, job_id: str, section_id: str) -> None:
        await self._send("DELETE", f"{self._workspace_path(job_id)}/sections/{section_id}", "Delete section")

    async def create_item(self, job_id: str, section_id: str, fields: Dict[str, Any]) -> Item:
        action = "Create item"
        data = await self._send("POST", self._item_path(job_id, section_id), action, json=fields)
        return self._parse(Item, self._extract(data, "item", action), action)

    async def delete_item(self, job_id: str, section_id: str, item_id: str) -> None:
        await self._send("DELETE", self._item_path(job_id, section_id, item_id), "Delete item")

    async def add_reaction(
        self, job_id: str, section_id: str, item_id: str, reaction_type: ReactionType
    ) -> List[Reaction]:
        action = "React"
        data = await self._send(
            "POST",
            f"{self._item_path(job_id, section_id, item_id)}/reactions",
            action,
            json={"type": ReactionType(reaction_type).value},
        )
        return [self._parse(Reaction, r, action) for r in self._extract(data, "reactions", action) or []]

    async def add_comment(
        self, job_id: str, section_id: str, item_id: str, content: str
    ) -> List[Comment]:
        action = "Add comment"
        data = await self._send(
            "POST",
            f"{self._item_path(job_id, section_id, item_id)}/comments",
            action,
            json={"content": content},
        )
        return [self._parse(Comment, c, action) for c in self._extract(data, "comments", action) or []]

    async def upload(
        self,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
        public: bool = False,
    ) -> UploadResult:
        action = "Upload file"
        path = "/upload/public" if public else "/upload"
        files = {"file": (filename, content, content_type or "application/octet-stream")}
        data = await self._send("POST", path, action, files=files)
        if not isinstance(data, dict):
            raise NetworkOrServerError(f"{action} returned no URL")
        url = normalize_file_url(data.get("url") or data.get("filename"), self.base_url)
        if not url:
            raise NetworkOrServerError(f"{action} returned no URL")
        logger.info("File uploaded", extra={"file_name": filename, "url": url})
        return UploadResult(url=url, filename=data.get("filename"))

    @staticmethod
    def _parse(model, raw: Any, action: str):
        try:
            return model.model_validate(raw)
        except PydanticValidationError as e:
            raise to_workspace_error(e, action) from e

    async def close(self) -> None:
        await self.client.aclose()
