"""Build request bodies for section and item creation from form input."""

from typing import Any, Dict, Iterable, Optional, Union

from ..core.errors import ValidationError
from ..core.ids import is_temp_id
from ..core.models import Attachment, ItemType


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def require_text(value: Optional[str], field: str) -> str:
    """Return ``value`` trimmed, or raise if nothing is left."""
    cleaned = _clean(value)
    if cleaned is None:
        raise ValidationError(f"{field} is required")
    return cleaned


def build_section_fields(
    title: Optional[str],
    description: Optional[str] = None,
    attachments: Optional[Iterable[Attachment]] = None,
) -> Dict[str, Any]:
    fields: Dict[str, Any] = {"title": require_text(title, "Section title")}
    description = _clean(description)
    if description is not None:
        fields["description"] = description
    if attachments is not None:
        fields["attachments"] = [_attachment_payload(a) for a in attachments]
    return fields


def _attachment_payload(attachment: Attachment) -> Dict[str, Any]:
    # unsaved attachments get their id from the server
    payload = attachment.to_payload()
    if is_temp_id(attachment.id):
        payload.pop("id", None)
    return payload


def _parse_price(price: Union[str, float, int, None]) -> Optional[float]:
    if price is None or (isinstance(price, str) and not price.strip()):
        return None
    try:
        value = float(price)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid price: {price!r}")
    if value < 0:
        raise ValidationError("Price cannot be negative")
    return value


def build_item_fields(
    item_type: Union[ItemType, str],
    title: Optional[str],
    description: Optional[str] = None,
    file_url: Optional[str] = None,
    link_url: Optional[str] = None,
    price: Union[str, float, int, None] = None,
    currency: Optional[str] = None,
    store_name: Optional[str] = None,
    store_address: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Assemble the body of an item creation request.

    Only the fields that belong to the item's type are kept: images and
    files carry ``fileUrl``, links carry ``linkUrl``, products carry both
    plus price and store details.

    Raises:
        ValidationError: If the type is unknown, the title is blank or
            the price is not a non-negative number
    """
    try:
        item_type = ItemType(item_type)
    except ValueError:
        raise ValidationError(f"Unknown item type: {item_type!r}")

    fields: Dict[str, Any] = {
        "type": item_type.value,
        "title": require_text(title, "Item title"),
    }
    optional: Dict[str, Any] = {"description": _clean(description)}

    if item_type in (ItemType.IMAGE, ItemType.FILE):
        optional["fileUrl"] = _clean(file_url)
    elif item_type == ItemType.LINK:
        optional["linkUrl"] = _clean(link_url)
    elif item_type == ItemType.PRODUCT:
        optional.update(
            {
                "fileUrl": _clean(file_url),
                "linkUrl": _clean(link_url),
                "price": _parse_price(price),
                "currency": _clean(currency),
                "storeName": _clean(store_name),
                "storeAddress": _clean(store_address),
            }
        )

    fields.update({k: v for k, v in optional.items() if v is not None})
    return fields
