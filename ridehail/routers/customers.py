# ridehail/routers/customers.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..db import JsonStore, get_store
from ..deps import get_current_user
from ..models.user import User
from ..services import orders, visibility

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("/orders/current")
def api_current_order(user: User = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    order = orders.current_for_customer(store, user)
    return order.to_dict() if order else None


@router.get("/orders/history")
def api_orders_history(user: User = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    return orders.history_for_customer(store, user)


@router.post("/orders/{order_id}/cancel")
def api_cancel_order(order_id: str, user: User = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    return orders.cancel(store, order_id, user).to_dict()


@router.get("/drivers/{driver_id}/public")
def api_driver_public(driver_id: str, user: User = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    return visibility.driver_public_for_customer(store, user, driver_id)
