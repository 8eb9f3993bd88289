"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate. Repositories
return SQLModel objects and perform commits/refreshes where appropriate.
"""

from datetime import datetime, timezone
from typing import List, Optional
from sqlmodel import Session, select
from . import models


class UserRepository:
    """CRUD operations for `User` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance."""
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get(self, user_id: int) -> Optional[models.User]:
        """Get a `User` by primary key."""
        return self.session.get(models.User, user_id)

    def get_by_email(self, email: str) -> Optional[models.User]:
        """Return a `User` by email or `None` if not found."""
        stmt = select(models.User).where(models.User.email == email)
        return self.session.exec(stmt).first()

    def update(self, user: models.User) -> models.User:
        """Save changes made to `user` and bump `updated_at`."""
        user.updated_at = datetime.now(timezone.utc)
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def delete(self, user_id: int) -> bool:
        """Delete a user by id. Returns False if no such user exists."""
        user = self.get(user_id)
        if not user:
            return False
        self.session.delete(user)
        self.session.commit()
        return True


class CategoryRepository:
    """Query helpers for `Category` records."""
    def __init__(self, session: Session):
        self.session = session

    def list_for_user(self, user_id: int, type: Optional[str] = None) -> List[models.Category]:
        """List a user's categories, optionally filtered by `type`."""
        stmt = select(models.Category).where(models.Category.user_id == user_id)
        if type is not None:
            stmt = stmt.where(models.Category.type == type)
        return self.session.exec(stmt.order_by(models.Category.id)).all()
