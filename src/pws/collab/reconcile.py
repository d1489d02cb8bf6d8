"""Fold authoritative server entities into the local section tree.

Every function here is pure: it takes the current list of sections and
returns a new list, leaving the input untouched. Entities are addressed
by id, never by position, so a response still lands on the right entity
after other sections or items were added or removed in the meantime.
Applying the same server entity twice yields the same tree as applying
it once.
"""

from typing import Callable, Dict, Iterable, List, Optional

from ..core.models import Comment, Item, Reaction, Section
from ..utils.logging import get_logger

logger = get_logger(__name__)

# Fields that only exist on the client and must survive a server merge.
LOCAL_SECTION_FIELDS = frozenset({"is_expanded"})


def find_section(sections: Iterable[Section], section_id: str) -> Optional[Section]:
    for section in sections:
        if section.id == section_id:
            return section
    return None


def find_item(sections: Iterable[Section], section_id: str, item_id: str) -> Optional[Item]:
    section = find_section(sections, section_id)
    return section.find_item(item_id) if section else None


def _map_section(
    sections: List[Section], section_id: str, fn: Callable[[Section], Section]
) -> List[Section]:
    return [fn(s) if s.id == section_id else s for s in sections]


def _map_item(
    sections: List[Section], section_id: str, item_id: str, fn: Callable[[Item], Item]
) -> List[Section]:
    def update(section: Section) -> Section:
        items = [fn(i) if i.id == item_id else i for i in section.items]
        return section.model_copy(update={"items": items})

    return _map_section(sections, section_id, update)


def replace_sections(
    local: List[Section], incoming: List[Section], preserve_expansion: bool = True
) -> List[Section]:
    """Replace the whole tree with a freshly loaded one.

    With ``preserve_expansion`` the expansion flag of sections that still
    exist is carried over; new sections start collapsed.
    """
    if not preserve_expansion:
        return [s.model_copy(update={"is_expanded": False}) for s in incoming]
    expanded: Dict[str, bool] = {s.id: s.is_expanded for s in local}
    return [s.model_copy(update={"is_expanded": expanded.get(s.id, False)}) for s in incoming]


def append_section(sections: List[Section], section: Section) -> List[Section]:
    """Add a newly created section, expanded. A known id is replaced in place."""
    created = section.model_copy(update={"is_expanded": True})
    if find_section(sections, section.id) is not None:
        return _map_section(sections, section.id, lambda _: created)
    return [*sections, created]


def merge_section(sections: List[Section], returned: Section) -> List[Section]:
    """Merge the fields the server returned into the matching local section."""
    update = {
        name: getattr(returned, name)
        for name in returned.model_fields_set
        if name not in LOCAL_SECTION_FIELDS
    }
    if find_section(sections, returned.id) is None:
        logger.warning("Merge target section not found", extra={"section_id": returned.id})
        return list(sections)
    return _map_section(sections, returned.id, lambda s: s.model_copy(update=update))


def remove_section(sections: List[Section], section_id: str) -> List[Section]:
    return [s for s in sections if s.id != section_id]


def toggle_expanded(sections: List[Section], section_id: str) -> List[Section]:
    return _map_section(
        sections, section_id, lambda s: s.model_copy(update={"is_expanded": not s.is_expanded})
    )


def append_item(sections: List[Section], section_id: str, item: Item) -> List[Section]:
    def update(section: Section) -> Section:
        if section.find_item(item.id) is not None:
            items = [item if i.id == item.id else i for i in section.items]
        else:
            items = [*section.items, item]
        return section.model_copy(update={"items": items})

    return _map_section(sections, section_id, update)


def remove_item(sections: List[Section], section_id: str, item_id: str) -> List[Section]:
    def update(section: Section) -> Section:
        return section.model_copy(update={"items": [i for i in section.items if i.id != item_id]})

    return _map_section(sections, section_id, update)


def replace_reactions(
    sections: List[Section], section_id: str, item_id: str, reactions: List[Reaction]
) -> List[Section]:
    """Install the server's reaction list for an item.

    The server enforces one reaction per user; the list is taken as-is.
    """
    seen = set()
    for reaction in reactions:
        if reaction.user_id in seen:
            logger.warning(
                "Server returned several reactions for one user",
                extra={"item_id": item_id, "user_id": reaction.user_id},
            )
        seen.add(reaction.user_id)
    return _map_item(
        sections, section_id, item_id, lambda i: i.model_copy(update={"reactions": list(reactions)})
    )


def replace_comments(
    sections: List[Section], section_id: str, item_id: str, comments: List[Comment]
) -> List[Section]:
    return _map_item(
        sections, section_id, item_id, lambda i: i.model_copy(update={"comments": list(comments)})
    )
