from __future__ import annotations

from typing import Optional, Tuple

from category_api.core.errors import ValidationError
from category_api.db.models.category import DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH


# PUBLIC_INTERFACE
def validate_category(name: Optional[str], description: Optional[str]) -> Tuple[str, str]:
    """
    Check category fields and return them trimmed.

    Raises:
        ValidationError: naming the first offending field.
    """
    name = (name or "").strip()
    description = (description or "").strip()

    if not name:
        raise ValidationError("name", "name is required")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError("name", f"name must be at most {NAME_MAX_LENGTH} characters")
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            "description", f"description must be at most {DESCRIPTION_MAX_LENGTH} characters"
        )
    return name, description


# PUBLIC_INTERFACE
def validate_category_id(category_id: int) -> int:
    if category_id <= 0:
        raise ValidationError("id", "id must be a positive integer")
    return category_id
