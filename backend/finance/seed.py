"""Default category data and the seeding operation.

`DEFAULT_CATEGORIES` is plain data; `seed_default_categories` inserts a
category set for one user in a single transaction, so a user either gets
the whole set or none of it.
"""

import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from . import models
from .errors import SeedError

logger = logging.getLogger("finance.database")

CATEGORY_TYPES = ("expense", "income")

DEFAULT_CATEGORIES: List[Dict[str, str]] = [
    {"name": "Food", "type": "expense", "icon": "🍔", "color": "#e74c3c"},
    {"name": "Leisure", "type": "expense", "icon": "🏠", "color": "#9b59b6"},
    {"name": "Transport", "type": "expense", "icon": "🚗", "color": "#3498db"},
    {"name": "Health", "type": "expense", "icon": "💊", "color": "#1abc9c"},
    {"name": "Entertainment", "type": "expense", "icon": "🎯", "color": "#f39c12"},
    {"name": "Clothing", "type": "expense", "icon": "👕", "color": "#e67e22"},
    {"name": "Education", "type": "expense", "icon": "📚", "color": "#2ecc71"},
    {"name": "Utilities", "type": "expense", "icon": "⚡", "color": "#34495e"},
    {"name": "Other expenses", "type": "expense", "icon": "💳", "color": "#95a5a6"},
    {"name": "Salary", "type": "income", "icon": "💼", "color": "#27ae60"},
    {"name": "Other income", "type": "income", "icon": "💰", "color": "#16a085"},
]


def _validate(category: Dict[str, str]) -> None:
    name = (category.get("name") or "").strip()
    if not name:
        raise SeedError(f"category without a name: {category!r}")
    if category.get("type") not in CATEGORY_TYPES:
        raise SeedError(f"category {name!r} has invalid type {category.get('type')!r}")


def seed_default_categories(db, user_id: int, categories: Optional[Sequence[Dict[str, str]]] = None) -> List[models.Category]:
    """Insert `categories` (default: `DEFAULT_CATEGORIES`) for `user_id`.

    Every entry is validated before anything is written. Returns the
    created `Category` rows.
    """
    if categories is None:
        categories = DEFAULT_CATEGORIES
    for category in categories:
        _validate(category)

    with db.session() as session:
        rows = [
            models.Category(
                user_id=user_id,
                name=c["name"].strip(),
                type=c["type"],
                icon=c.get("icon"),
                color=c.get("color"),
                description=c.get("description"),
            )
            for c in categories
        ]
        try:
            session.add_all(rows)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise SeedError(f"insert for user {user_id} failed: {exc}") from exc
        for row in rows:
            session.refresh(row)
    logger.info("seeded %d categories for user %s", len(rows), user_id)
    return rows
