"""Drink entry routes."""
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlmodel import Session, select

from hydromate.api.deps import entry_repository, get_app_session
from hydromate.config import get_settings
from hydromate.models.drink import Drink, DrinkEntry
from hydromate.tracking.repository import EntryRepository

router = APIRouter()


class EntryCreate(BaseModel):
    amount_ml: int = Field(gt=0)
    drink_id: Optional[int] = None
    drink_name: Optional[str] = None  # used when drink_id is not given
    timestamp: Optional[datetime] = None


class EntryRead(BaseModel):
    id: int
    drink_id: int
    drink_name: Optional[str]
    amount_ml: int
    timestamp: datetime


def _to_read(entry: DrinkEntry, drink: Optional[Drink]) -> EntryRead:
    return EntryRead(
        id=entry.id,
        drink_id=entry.drink_id,
        drink_name=drink.name if drink else None,
        amount_ml=entry.amount_ml,
        timestamp=entry.timestamp,
    )


def _resolve_drink(request: EntryCreate, session: Session) -> Drink:
    if request.drink_id is not None:
        drink = session.get(Drink, request.drink_id)
    elif request.drink_name:
        wanted = request.drink_name.strip().lower()
        drink = next(
            (d for d in session.exec(select(Drink)).all() if d.name.lower() == wanted),
            None,
        )
    else:
        drink = session.exec(select(Drink).order_by(Drink.id)).first()

    if not drink:
        raise HTTPException(status_code=404, detail="Drink not found")
    return drink


@router.post("/", response_model=EntryRead, status_code=201)
def create_entry(
    request: EntryCreate,
    session: Session = Depends(get_app_session),
    repo: EntryRepository = Depends(entry_repository),
):
    """Log a drink. Defaults to the first catalogue drink (water)."""
    drink = _resolve_drink(request, session)
    entry = repo.add(request.amount_ml, drink_id=drink.id, timestamp=request.timestamp)
    return _to_read(entry, drink)


@router.get("/", response_model=List[EntryRead])
def list_entries(
    day: Optional[date] = None,
    session: Session = Depends(get_app_session),
):
    """Entries of one local day (today by default), oldest first."""
    start = datetime.combine(day or date.today(), time.min)
    rows = session.exec(
        select(DrinkEntry)
        .where(DrinkEntry.user_id == get_settings().user_id)
        .where(DrinkEntry.timestamp >= start)
        .where(DrinkEntry.timestamp < start + timedelta(days=1))
        .order_by(DrinkEntry.timestamp)
    ).all()
    return [_to_read(e, session.get(Drink, e.drink_id)) for e in rows]


@router.delete("/{entry_id}", status_code=204)
def delete_entry(entry_id: int, repo: EntryRepository = Depends(entry_repository)):
    if not repo.delete(entry_id):
        raise HTTPException(status_code=404, detail="Entry not found")
    return Response(status_code=204)
