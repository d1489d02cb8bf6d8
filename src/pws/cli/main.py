"""CLI application using Typer for inspecting and editing project workspaces."""

import asyncio
import mimetypes
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from ..api.client import HttpWorkspaceRepository
from ..attachments.classify import format_file_size
from ..collab.forms import build_item_fields
from ..collab.roles import UserRole, WorkspaceSession
from ..collab.workspace import Notification, NotificationLevel, WorkspaceStateManager
from ..core.errors import ValidationError
from ..core.models import ItemType, ReactionType
from ..utils.logging import get_logger

app = typer.Typer(
    name="pws",
    help="Project Workspace - sections, items, reactions and comments for a job",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)

T = TypeVar("T")


def _print_notification(notification: Notification) -> None:
    if notification.level == NotificationLevel.SUCCESS:
        console.print(f"[green]✓ {notification.message}[/green]")
    else:
        hint = " (retry later)" if notification.retryable else ""
        console.print(f"[red]Error: {notification.message}{hint}[/red]")


def _run(
    job_id: str,
    role: UserRole,
    user_id: str,
    user_name: str,
    action: Callable[[WorkspaceStateManager], Awaitable[T]],
    api_url: Optional[str] = None,
) -> T:
    """Load the workspace, run ``action`` against it and close the client."""

    async def runner() -> T:
        session = WorkspaceSession(role=role, user_id=user_id, user_name=user_name)
        async with HttpWorkspaceRepository(base_url=api_url) as repository:
            manager = WorkspaceStateManager(job_id, session, repository, on_notify=_print_notification)
            if not await manager.load():
                raise typer.Exit(1)
            return await action(manager)

    return asyncio.run(runner())


def _read_file(path: Path):
    content_type, _ = mimetypes.guess_type(path.name)
    return path.name, path.read_bytes(), content_type


def _render(manager: WorkspaceStateManager) -> None:
    if not manager.sections:
        console.print("[yellow]Workspace is empty[/yellow]")
        return
    for section in manager.sections:
        table = Table(title=f"{section.title} [dim]({section.id})[/dim]", title_justify="left")
        table.add_column("Item", style="cyan")
        table.add_column("Type")
        table.add_column("Details")
        table.add_column("Reactions", justify="right")
        table.add_column("Comments", justify="right")
        for item in section.items:
            details = item.link_url or item.file_url or ""
            if item.price is not None:
                details = f"{item.price:.2f} {item.currency or ''} {item.store_name or ''}".strip()
            counts = item.reaction_counts()
            reactions = " ".join(f"{t.value}:{n}" for t, n in counts.items() if n)
            table.add_row(f"{item.title} [dim]({item.id})[/dim]", item.type.value, details, reactions, str(len(item.comments)))
        console.print(table)
        for attachment in section.attachments:
            size = format_file_size(attachment.file_size)
            console.print(f"  📎 [{attachment.file_type.value}] {attachment.file_name} {size}")
    console.print(f"[bold]{len(manager.sections)} sections, {manager.total_items} items[/bold]")


RoleOption = typer.Option(UserRole.CLIENT, "--role", "-r", help="Acting role (client or professional)")
ProRoleOption = typer.Option(UserRole.PROFESSIONAL, "--role", "-r", help="Acting role (client or professional)")
UserIdOption = typer.Option("cli", "--user-id", help="Acting user id")
UserNameOption = typer.Option("", "--user-name", help="Acting user display name")
ApiUrlOption = typer.Option(None, "--api-url", help="API base URL (default: PWS_API_BASE_URL)")


@app.command()
def show(
    job_id: str = typer.Argument(..., help="Job/project id"),
    role: UserRole = RoleOption,
    user_id: str = UserIdOption,
    user_name: str = UserNameOption,
    api_url: Optional[str] = ApiUrlOption,
    mark_viewed: bool = typer.Option(False, "--mark-viewed/--no-mark-viewed", help="Send a read receipt"),
) -> None:
    """Print the sections and items of a workspace."""

    async def action(manager: WorkspaceStateManager) -> None:
        if mark_viewed:
            await manager.mark_materials_viewed()
        _render(manager)

    _run(job_id, role, user_id, user_name, action, api_url)


@app.command("add-section")
def add_section(
    job_id: str = typer.Argument(..., help="Job/project id"),
    title: str = typer.Option(..., "--title", "-t", help="Section title"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    attach: Optional[List[Path]] = typer.Option(None, "--attach", "-a", exists=True, dir_okay=False, help="File to attach"),
    role: UserRole = ProRoleOption,
    user_id: str = UserIdOption,
    user_name: str = UserNameOption,
    api_url: Optional[str] = ApiUrlOption,
) -> None:
    """Create a section, uploading any attached files first."""

    async def action(manager: WorkspaceStateManager) -> bool:
        attachments = []
        for path in attach or []:
            attachment = await manager.upload_section_attachment(*_read_file(path))
            if attachment is None:
                return False
            attachments.append(attachment)
        return await manager.create_section(title, description, attachments) is not None

    if not _run(job_id, role, user_id, user_name, action, api_url):
        raise typer.Exit(1)


@app.command("delete-section")
def delete_section(
    job_id: str = typer.Argument(..., help="Job/project id"),
    section_id: str = typer.Argument(..., help="Section id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    role: UserRole = ProRoleOption,
    user_id: str = UserIdOption,
    user_name: str = UserNameOption,
    api_url: Optional[str] = ApiUrlOption,
) -> None:
    """Delete a section with all its items."""

    def confirm(section) -> bool:
        return yes or typer.confirm(f"Delete '{section.title}' and its {len(section.items)} items?")

    async def action(manager: WorkspaceStateManager) -> bool:
        return await manager.delete_section(section_id, confirm=confirm)

    if not _run(job_id, role, user_id, user_name, action, api_url):
        raise typer.Exit(1)


@app.command("add-item")
def add_item(
    job_id: str = typer.Argument(..., help="Job/project id"),
    section_id: str = typer.Argument(..., help="Section id"),
    item_type: ItemType = typer.Option(ItemType.IMAGE, "--type", help="image, file, link or product"),
    title: str = typer.Option(..., "--title", "-t"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", exists=True, dir_okay=False, help="File to upload"),
    link: Optional[str] = typer.Option(None, "--link", help="Link URL"),
    price: Optional[str] = typer.Option(None, "--price"),
    currency: Optional[str] = typer.Option(None, "--currency"),
    store_name: Optional[str] = typer.Option(None, "--store-name"),
    store_address: Optional[str] = typer.Option(None, "--store-address"),
    role: UserRole = ProRoleOption,
    user_id: str = UserIdOption,
    user_name: str = UserNameOption,
    api_url: Optional[str] = ApiUrlOption,
) -> None:
    """Add an item to a section."""

    async def action(manager: WorkspaceStateManager) -> bool:
        file_url = None
        if file is not None:
            file_url = await manager.upload_item_file(*_read_file(file))
            if file_url is None:
                return False
        try:
            fields = build_item_fields(
                item_type,
                title,
                description=description,
                file_url=file_url,
                link_url=link,
                price=price,
                currency=currency,
                store_name=store_name,
                store_address=store_address,
            )
        except ValidationError as e:
            console.print(f"[red]Error: {e.message}[/red]")
            return False
        return await manager.create_item(section_id, fields) is not None

    if not _run(job_id, role, user_id, user_name, action, api_url):
        raise typer.Exit(1)


@app.command("delete-item")
def delete_item(
    job_id: str = typer.Argument(..., help="Job/project id"),
    section_id: str = typer.Argument(..., help="Section id"),
    item_id: str = typer.Argument(..., help="Item id"),
    role: UserRole = ProRoleOption,
    user_id: str = UserIdOption,
    user_name: str = UserNameOption,
    api_url: Optional[str] = ApiUrlOption,
) -> None:
    """Remove an item from a section."""

    async def action(manager: WorkspaceStateManager) -> bool:
        return await manager.delete_item(section_id, item_id)

    if not _run(job_id, role, user_id, user_name, action, api_url):
        raise typer.Exit(1)


@app.command()
def react(
    job_id: str = typer.Argument(..., help="Job/project id"),
    section_id: str = typer.Argument(..., help="Section id"),
    item_id: str = typer.Argument(..., help="Item id"),
    reaction: ReactionType = typer.Argument(..., help="like, love or approved"),
    role: UserRole = RoleOption,
    user_id: str = UserIdOption,
    user_name: str = UserNameOption,
    api_url: Optional[str] = ApiUrlOption,
) -> None:
    """React to an item (clients only)."""

    async def action(manager: WorkspaceStateManager) -> bool:
        item = await manager.react(section_id, item_id, reaction)
        if item is None:
            return False
        counts = item.reaction_counts()
        console.print(" ".join(f"{t.value}: {n}" for t, n in counts.items()))
        mine = manager.my_reaction(section_id, item_id)
        if mine is not None:
            console.print(f"Your reaction: [bold]{mine.value}[/bold]")
        return True

    if not _run(job_id, role, user_id, user_name, action, api_url):
        raise typer.Exit(1)


@app.command()
def comment(
    job_id: str = typer.Argument(..., help="Job/project id"),
    section_id: str = typer.Argument(..., help="Section id"),
    item_id: str = typer.Argument(..., help="Item id"),
    content: str = typer.Argument(..., help="Comment text"),
    role: UserRole = RoleOption,
    user_id: str = UserIdOption,
    user_name: str = UserNameOption,
    api_url: Optional[str] = ApiUrlOption,
) -> None:
    """Comment on an item."""

    async def action(manager: WorkspaceStateManager) -> bool:
        item = await manager.add_comment(section_id, item_id, content)
        if item is None:
            return False
        for c in item.comments[-5:]:
            console.print(f"[cyan]{c.user_name or c.user_id}[/cyan]: {c.content}")
        return True

    if not _run(job_id, role, user_id, user_name, action, api_url):
        raise typer.Exit(1)


@app.command()
def upload(
    job_id: str = typer.Argument(..., help="Job/project id"),
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="File to upload"),
    public: bool = typer.Option(False, "--public", help="Upload as a section attachment"),
    role: UserRole = ProRoleOption,
    user_id: str = UserIdOption,
    user_name: str = UserNameOption,
    api_url: Optional[str] = ApiUrlOption,
) -> None:
    """Upload a file and print its URL."""

    async def action(manager: WorkspaceStateManager) -> bool:
        if public:
            attachment = await manager.upload_section_attachment(*_read_file(file))
            url = attachment.file_url if attachment else None
        else:
            url = await manager.upload_item_file(*_read_file(file))
        if url is None:
            return False
        console.print(url)
        return True

    if not _run(job_id, role, user_id, user_name, action, api_url):
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
