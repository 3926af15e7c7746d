# ridehail/routers/reviews.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..db import JsonStore, get_store
from ..deps import get_current_user
from ..models.user import User
from ..services import reviews

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("")
def api_create_review(payload: dict, user: User = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    return reviews.create(store, user, payload).to_dict()
