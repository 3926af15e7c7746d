# ridehail/routers/drivers.py
from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from ..db import JsonStore, get_store
from ..deps import get_current_user
from ..models.user import User
from ..services import drivers, orders, reviews, visibility

router = APIRouter(prefix="/drivers", tags=["drivers"])


# ---------- Водитель: профиль и линия ----------
@router.api_route("/me/online", methods=["POST", "PATCH"])
def api_go_online(user: User = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    return drivers.set_online(store, user, True).to_dict()


@router.api_route("/me/offline", methods=["POST", "PATCH"])
def api_go_offline(user: User = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    return drivers.set_online(store, user, False).to_dict()


@router.api_route("/me/location", methods=["POST", "PATCH"])
def api_update_location(
    payload: dict, user: User = Depends(get_current_user), store: JsonStore = Depends(get_store)
):
    return drivers.update_location(store, user, payload).to_dict()


@router.get("/me/profile")
def api_driver_profile(user: User = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    return drivers.get_profile(store, user).to_profile()


@router.get("/me/reviews")
def api_driver_reviews(user: User = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    return reviews.summary_for_driver(store, user)


@router.get("/customers/{customer_id}/public")
def api_customer_public(
    customer_id: str, user: User = Depends(get_current_user), store: JsonStore = Depends(get_store)
):
    return visibility.customer_public_for_driver(store, user, customer_id)


# ---------- Водитель: заказы ----------
@router.get("/orders/available")
def api_available_orders(user: User = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    return [o.to_dict() for o in orders.available_for_driver(store, user)]


@router.get("/orders/current")
def api_driver_current_order(user: User = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    order = orders.current_for_driver(store, user)
    return order.to_dict() if order else None


@router.get("/orders/history")
def api_driver_orders_history(user: User = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    return orders.history_for_driver(store, user)


@router.post("/orders/{order_id}/accept")
def api_accept_order(order_id: str, user: User = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    return orders.accept(store, order_id, user).to_dict()


@router.post("/orders/{order_id}/status")
def api_move_status(
    order_id: str,
    payload: dict = Body(default_factory=dict),
    user: User = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    return orders.set_status(store, order_id, user, payload.get("status")).to_dict()
