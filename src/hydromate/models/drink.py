"""Drink catalogue and logged drink entries."""
from datetime import datetime
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


class Drink(SQLModel, table=True):
    """One row per drink type the user can log."""

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)

    # Fraction of pure-water equivalence (water = 1.0, allowed 0.0-1.2)
    hydration_multiplier: float = 1.0

    caffeine_mg_per_250ml: int = 0
    alcohol_percentage: float = 0.0  # ABV

    is_custom: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)

    entries: List["DrinkEntry"] = Relationship(back_populates="drink")

    @property
    def contains_caffeine(self) -> bool:
        return self.caffeine_mg_per_250ml > 0

    @property
    def contains_alcohol(self) -> bool:
        return self.alcohol_percentage > 0


class DrinkEntry(SQLModel, table=True):
    """
    One row per logged drink. Immutable once written; the only mutation
    is deletion.
    """

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(default=1, index=True)
    drink_id: int = Field(default=1, foreign_key="drink.id", index=True)
    amount_ml: int
    timestamp: datetime = Field(default_factory=datetime.now, index=True)  # local wall-clock

    drink: Optional[Drink] = Relationship(back_populates="entries")
