import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

import auth
import catalog
import orders
from database import Storage
from errors import OrderServiceError, StorageError
from pricing import DEFAULT_DELIVERY_TIME, DELIVERY_TIMES
from schemas import Credentials, OrderDraft, User
from wizard import OrderWizard

logger = logging.getLogger(__name__)


def create_app(storage: Optional[Storage] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.storage is None
        if owned:
            app.state.storage = Storage.from_env()
        store = app.state.storage
        try:
            store.ensure_indexes()
            store.seed_services(catalog.DEFAULT_SERVICES)
            admin_name = os.getenv("ADMIN_USERNAME")
            admin_password = os.getenv("ADMIN_PASSWORD")
            if admin_name and admin_password:
                auth.ensure_admin(store, admin_name, admin_password)
        except StorageError as e:
            logger.error("Startup database setup skipped: %s", e.detail)
        yield
        if owned:
            store.close()

    app = FastAPI(title="Photo Editing Order API", lifespan=lifespan)
    app.state.storage = storage

    secret = os.getenv("SESSION_SECRET")
    if not secret:
        logger.warning("SESSION_SECRET not set, using an insecure development secret")
        secret = "dev-session-secret"

    app.add_middleware(SessionMiddleware, secret_key=secret)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(OrderServiceError)
    async def order_service_error(request: Request, exc: OrderServiceError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    def get_storage(request: Request) -> Storage:
        return request.app.state.storage

    async def json_body(request: Request) -> Any:
        # a missing or broken body is left for the operation to reject
        try:
            return await request.json()
        except ValueError:
            return None

    def current_user(request: Request, store: Storage = Depends(get_storage)) -> Optional[User]:
        user_id = request.session.get("user_id")
        if user_id is None:
            return None
        user = store.get_user(user_id)
        if user is None:
            request.session.clear()
            return None
        return auth.public(user)

    @app.get("/")
    def root():
        return {"message": "Photo Editing Order API running"}

    @app.get("/test")
    def test_database(store: Storage = Depends(get_storage)):
        response = {
            "backend": "✅ Running",
            "database": "❌ Not Available",
        }
        try:
            response["collections"] = store.ping()
            response["database"] = "✅ Connected"
        except StorageError as e:
            response["database"] = f"⚠️ {e.detail[:80]}"
        return response

    # Auth

    @app.post("/api/register", status_code=201)
    def register(req: Credentials, request: Request, store: Storage = Depends(get_storage)):
        user = auth.register(store, req.username, req.password)
        request.session["user_id"] = user.id
        return user.model_dump()

    @app.post("/api/login")
    def login(req: Credentials, request: Request, store: Storage = Depends(get_storage)):
        user = auth.authenticate(store, req.username, req.password)
        request.session["user_id"] = user.id
        return user.model_dump()

    @app.post("/api/logout")
    def logout(request: Request):
        request.session.clear()
        return {"logged_out": True}

    @app.get("/api/user")
    def get_user(caller: Optional[User] = Depends(current_user)):
        return auth.require_user(caller).model_dump()

    # Services

    @app.get("/api/services")
    def list_services(store: Storage = Depends(get_storage)):
        return [s.model_dump() for s in catalog.list_services(store)]

    @app.patch("/api/services/{service_id}")
    def update_service(
        service_id: int,
        payload: Any = Depends(json_body),
        store: Storage = Depends(get_storage),
        caller: Optional[User] = Depends(current_user),
    ):
        role = caller.role if caller else None
        return catalog.update_service(store, service_id, payload, role).model_dump()

    # Pricing

    @app.get("/api/delivery-times")
    def delivery_times():
        return [
            {**t, "default": str(t["hours"]) == DEFAULT_DELIVERY_TIME}
            for t in DELIVERY_TIMES
        ]

    @app.post("/api/quote")
    def quote(draft: OrderDraft, store: Storage = Depends(get_storage)):
        service = store.get_service(draft.service_id) if draft.service_id else None
        return OrderWizard(draft).quote(service).model_dump()

    # Orders

    @app.post("/api/orders", status_code=201)
    def create_order(
        payload: Any = Depends(json_body),
        store: Storage = Depends(get_storage),
        caller: Optional[User] = Depends(current_user),
    ):
        customer_id = caller.id if caller else None
        return orders.submit_order(store, payload, customer_id).model_dump()

    @app.get("/api/orders")
    def list_orders(store: Storage = Depends(get_storage), caller: Optional[User] = Depends(current_user)):
        return [o.model_dump() for o in orders.list_orders(store, caller)]

    @app.patch("/api/orders/{order_id}/status")
    def update_order_status(
        order_id: int,
        payload: Any = Depends(json_body),
        store: Storage = Depends(get_storage),
        caller: Optional[User] = Depends(current_user),
    ):
        role = caller.role if caller else None
        status = payload.get("status") if isinstance(payload, dict) else None
        return orders.set_order_status(store, order_id, status, role).model_dump()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
