"""Database models for saved tracker progress."""

import datetime as dt

from sqlmodel import Field, SQLModel, UniqueConstraint


class ProgressEntry(SQLModel, table=True):
    """One key-value pair of a profile's saved progress."""

    __table_args__ = (UniqueConstraint("profile", "key"),)

    id: int | None = Field(default=None, primary_key=True)
    profile: str = Field(index=True)
    key: str
    value: str
    updated_at: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.UTC)
    )
