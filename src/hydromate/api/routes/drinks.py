"""Drink catalogue routes."""
from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from hydromate.api.deps import get_app_session
from hydromate.models.drink import Drink

router = APIRouter()


@router.get("/", response_model=List[Drink])
def list_drinks(session: Session = Depends(get_app_session)):
    """All drinks, in catalogue order."""
    return session.exec(select(Drink).order_by(Drink.id)).all()
