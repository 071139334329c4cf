# bookstore/api/__init__.py
from fastapi import FastAPI

from bookstore.api.responses import register_exception_handlers
from bookstore.api.routers import (
    addresses,
    auth,
    authors,
    books,
    carts,
    genres,
    health,
    orders,
    payments,
    reviews,
    users,
    wishlists,
)

ROUTERS = (
    health.router,
    auth.router,
    users.router,
    authors.router,
    genres.router,
    books.router,
    addresses.router,
    carts.router,
    orders.router,
    payments.router,
    reviews.router,
    wishlists.router,
)


def include_routers(app: FastAPI):
    register_exception_handlers(app)
    for router in ROUTERS:
        app.include_router(router)
