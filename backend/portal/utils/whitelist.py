"""
Whitelisted field assignment for create/update handlers.

Only names listed for an entity may be written from request input, which
blocks mass assignment of columns such as ``is_admin`` on routes that should
not touch them.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List


def pick_fields(allowed: Iterable[str], payload: Dict[str, Any]) -> Dict[str, Any]:
    """Subset of ``payload`` restricted to ``allowed`` keys that are present"""
    return {field: payload[field] for field in allowed if field in payload}


def apply_update(entity: Any, allowed: Iterable[str], payload: Dict[str, Any]) -> List[str]:
    """Copy whitelisted keys from ``payload`` onto ``entity``.

    Returns the names that were assigned. ``updated_at`` is stamped when the
    entity has that column and at least one field changed.
    """
    changed = []
    for field, value in pick_fields(allowed, payload).items():
        setattr(entity, field, value)
        changed.append(field)

    if changed and hasattr(entity, "updated_at"):
        entity.updated_at = datetime.utcnow()
    return changed
