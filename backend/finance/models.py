"""SQLModel data models.

This module maps the application's tables to SQLModel classes. The
tables themselves are created by the SQL files in `migrations/`, not by
`SQLModel.metadata.create_all`, so column definitions here must stay in
step with those files.
"""

from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime, date, timezone


def _now() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """A registered user.

    Fields:
    - `name`: display name
    - `email`: unique contact address
    """
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, nullable=False, unique=True)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class Account(SQLModel, table=True):
    """A financial account (bank account, card, cash wallet) owned by a user."""
    __tablename__ = "accounts"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    name: str
    type: str
    balance: float = 0.0
    currency: str = "EUR"
    description: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class Category(SQLModel, table=True):
    """Classification of a transaction.

    `type` is either "expense" or "income". Categories with a `user_id`
    belong to that user; the default set is seeded per user.
    """
    __tablename__ = "categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    name: str
    type: str
    color: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class Transaction(SQLModel, table=True):
    """A single movement of money.

    `amount` is positive for income and negative for expenses.
    """
    __tablename__ = "transactions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    account_id: int = Field(foreign_key="accounts.id")
    category_id: Optional[int] = Field(default=None, foreign_key="categories.id")
    amount: float
    description: Optional[str] = None
    notes: Optional[str] = None
    date: date
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class SavingsGoal(SQLModel, table=True):
    """A per-user savings target with its current progress."""
    __tablename__ = "savings_goals"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    name: str
    description: Optional[str] = None
    target_amount: float
    current_amount: float = 0.0
    target_date: Optional[date] = None
    is_completed: bool = False
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class MigrationRecord(SQLModel, table=True):
    """One applied migration file, written by the migration runner."""
    __tablename__ = "migrations"

    id: Optional[int] = Field(default=None, primary_key=True)
    filename: str = Field(unique=True, nullable=False)
    executed_at: Optional[datetime] = None
