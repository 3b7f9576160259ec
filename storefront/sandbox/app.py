"""
Sandbox REST Server

FastAPI application implementing the storefront's REST contract in memory.
Used in development mode (mounted in-process through httpx.ASGITransport)
and runnable standalone with ``storefront sandbox``.

Contract:
    - Responses are envelopes: {"item": {...}}, {"items": [...]},
      {"data": [...], "meta": {"total": n}} for paginated listings
    - Access tokens are opaque bearer tokens with a TTL
    - The refresh token travels in the http-only "refreshToken" cookie
    - Validation failures: 400 {"errors": [{"code", "path", "message"}]}
    - Other failures: {"message": "..."} with the matching status

Endpoints:
    - POST /auth/login, /auth/refresh, /auth/logout; GET /auth/profile
    - /users (signup, admin listing, self update/delete, /users/admin)
    - /addresses, /categories, /items, /orders, /notifications
    - WS /ws: realtime notification push
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Cookie, Depends, FastAPI, Header, Query, Request, Response, WebSocket
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator
from starlette.websockets import WebSocketDisconnect

from storefront.sandbox.hub import NotificationHub
from storefront.sandbox.store import SandboxError, SandboxStore
from storefront.schemas import (
    ApiModel,
    OrderStatus,
    PaymentMethod,
    STATUS_LABELS,
    User,
    UserType,
    ZIP_CODE_PATTERN,
)

logger = logging.getLogger(__name__)

REFRESH_COOKIE = "refreshToken"


def dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


# =============================================================================
# REQUEST BODIES
# =============================================================================

class LoginBody(ApiModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class SignupBody(ApiModel):
    name: str = Field(..., min_length=3, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6)
    phone: str = Field(..., min_length=10, max_length=20)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("Invalid email")
        return v.strip()


class UserPatchBody(ApiModel):
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    phone: Optional[str] = Field(None, min_length=10, max_length=20)
    email: Optional[str] = Field(None, min_length=3, max_length=255)


class AddressBody(ApiModel):
    street: str = Field(..., min_length=3)
    number: str = Field(..., min_length=1)
    district: str = Field(..., min_length=2)
    city: str = Field(..., min_length=2)
    state: str = Field(..., min_length=2, max_length=2)
    zip_code: str

    @field_validator("zip_code")
    @classmethod
    def validate_zip(cls, v: str) -> str:
        if not ZIP_CODE_PATTERN.match(v):
            raise ValueError("Invalid zip code")
        return v


class AddressPatchBody(ApiModel):
    street: Optional[str] = Field(None, min_length=3)
    number: Optional[str] = Field(None, min_length=1)
    district: Optional[str] = Field(None, min_length=2)
    city: Optional[str] = Field(None, min_length=2)
    state: Optional[str] = Field(None, min_length=2, max_length=2)
    zip_code: Optional[str] = None

    @field_validator("zip_code")
    @classmethod
    def validate_zip(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not ZIP_CODE_PATTERN.match(v):
            raise ValueError("Invalid zip code")
        return v


class CategoryBody(ApiModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=255)


class CategoryPatchBody(ApiModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=255)


class ItemBody(ApiModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: str = Field("", max_length=500)
    unit_price: float = Field(..., gt=0)
    image_url: Optional[str] = None
    category_id: int
    available: bool = True


class ItemPatchBody(ApiModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    unit_price: Optional[float] = Field(None, gt=0)
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    available: Optional[bool] = None


class OrderLineBody(ApiModel):
    item_id: int
    quantity: int = Field(..., ge=1, le=99)
    unit_price: float = Field(..., ge=0)
    subtotal: float = Field(..., ge=0)


class OrderBody(ApiModel):
    client_id: int
    address_id: int
    payment_method: PaymentMethod
    total_amount: float = Field(..., ge=0)
    items: List[OrderLineBody] = Field(..., min_length=1)


class OrderPatchBody(ApiModel):
    client_id: Optional[int] = None
    confirmed_by_user_id: Optional[int] = None
    status: Optional[OrderStatus] = None


class ReadBody(ApiModel):
    id: int


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    store: SandboxStore,
    hub: NotificationHub,
    prefix: str = "",
    debug: bool = False,
) -> FastAPI:
    """
    Build the sandbox FastAPI application.

    Args:
        store: Backing in-memory store
        hub: Realtime fan-out for notifications
        prefix: Path prefix all routes are mounted under (e.g. "/api")
        debug: Include exception details in 500 responses
    """
    app = FastAPI(
        title="Storefront Sandbox",
        description="In-memory implementation of the storefront REST API.",
        docs_url="/docs",
        redoc_url=None,
    )
    router = APIRouter(prefix=prefix)

    # =========================================================================
    # DEPENDENCIES
    # =========================================================================

    def bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
        if authorization and authorization.lower().startswith("bearer "):
            return authorization[7:].strip()
        return None

    def current_user(token: Optional[str] = Depends(bearer_token)) -> User:
        user = store.user_for_access_token(token)
        if user is None:
            raise SandboxError(401, "Invalid or expired token")
        return user

    def admin_user(user: User = Depends(current_user)) -> User:
        if user.type != UserType.ADMIN:
            raise SandboxError(403, "Admin access required")
        return user

    def paginate(items: list, page: int, page_size: int) -> dict[str, Any]:
        start = (page - 1) * page_size
        return {
            "data": [dump(i) for i in items[start:start + page_size]],
            "meta": {"total": len(items), "page": page, "pageSize": page_size},
        }

    def set_refresh_cookie(response: Response, token: str) -> None:
        response.set_cookie(REFRESH_COOKIE, token, httponly=True, samesite="lax", path="/")

    # =========================================================================
    # AUTH
    # =========================================================================

    @router.post("/auth/login", tags=["Auth"])
    async def login(body: LoginBody, response: Response) -> dict[str, Any]:
        user = store.authenticate(body.email, body.password)
        access, refresh = store.issue_tokens(user.id)
        set_refresh_cookie(response, refresh)
        logger.info(f"Sandbox: user #{user.id} logged in")
        return {"accessToken": access, "user": dump(store.user_with_addresses(user))}

    @router.post("/auth/refresh", tags=["Auth"])
    async def refresh(
        response: Response,
        refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    ) -> dict[str, Any]:
        user, access, new_refresh = store.rotate_refresh_token(refresh_token)
        set_refresh_cookie(response, new_refresh)
        return {"accessToken": access, "user": dump(user)}

    @router.post("/auth/logout", tags=["Auth"])
    async def logout(
        response: Response,
        token: Optional[str] = Depends(bearer_token),
        refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    ) -> dict[str, Any]:
        store.revoke(token, refresh_token)
        response.delete_cookie(REFRESH_COOKIE, path="/")
        return {"message": "Logged out"}

    @router.get("/auth/profile", tags=["Auth"])
    async def profile(user: User = Depends(current_user)) -> dict[str, Any]:
        return {"user": dump(store.user_with_addresses(user))}

    # =========================================================================
    # USERS
    # =========================================================================

    @router.post("/users", status_code=201, tags=["Users"])
    async def signup(body: SignupBody) -> dict[str, Any]:
        user = store.create_user(body.name, body.email, body.password, body.phone)
        logger.info(f"Sandbox: user #{user.id} signed up")
        return {"message": "User created", "user": dump(user)}

    @router.post("/users/admin", status_code=201, tags=["Users"])
    async def create_admin(body: SignupBody, _: User = Depends(admin_user)) -> dict[str, Any]:
        user = store.create_user(body.name, body.email, body.password, body.phone, UserType.ADMIN)
        logger.info(f"Sandbox: admin #{user.id} created")
        return {"message": "Admin created", "user": dump(user)}

    @router.get("/users", tags=["Users"])
    async def list_users(
        page: int = Query(1, ge=1),
        page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
        _: User = Depends(admin_user),
    ) -> dict[str, Any]:
        users = sorted(store.users.values(), key=lambda u: u.id)
        start = (page - 1) * page_size
        return {"users": [dump(u) for u in users[start:start + page_size]]}

    @router.get("/users/{user_id}", tags=["Users"])
    async def get_user(user_id: int, user: User = Depends(current_user)) -> dict[str, Any]:
        if user.id != user_id and user.type != UserType.ADMIN:
            raise SandboxError(403, "Forbidden")
        return {"user": dump(store.get_user(user_id))}

    @router.get("/users/{user_id}/relations", tags=["Users"])
    async def get_user_relations(
        user_id: int,
        include: str = Query(""),
        user: User = Depends(current_user),
    ) -> dict[str, Any]:
        if user.id != user_id and user.type != UserType.ADMIN:
            raise SandboxError(403, "Forbidden")
        target = store.get_user(user_id)
        relations = {r.strip() for r in include.split(",") if r.strip()}
        if "addresses" in relations:
            target = store.user_with_addresses(target)
        return {"user": dump(target)}

    @router.patch("/users", tags=["Users"])
    async def update_me(body: UserPatchBody, user: User = Depends(current_user)) -> dict[str, Any]:
        updated = store.update_user(user.id, name=body.name, phone=body.phone, email=body.email)
        return {"user": dump(store.user_with_addresses(updated))}

    @router.delete("/users", status_code=204, tags=["Users"])
    async def delete_me(user: User = Depends(current_user)) -> Response:
        store.delete_user(user.id)
        logger.info(f"Sandbox: user #{user.id} deleted their account")
        return Response(status_code=204)

    # =========================================================================
    # ADDRESSES
    # =========================================================================

    @router.get("/addresses", tags=["Addresses"])
    async def list_addresses(user: User = Depends(current_user)) -> dict[str, Any]:
        return {"addresses": [dump(a) for a in store.list_addresses(user.id)]}

    @router.post("/addresses", status_code=201, tags=["Addresses"])
    async def create_address(body: AddressBody, user: User = Depends(current_user)) -> dict[str, Any]:
        address = store.create_address(user.id, **body.model_dump())
        return {"address": dump(address)}

    @router.patch("/addresses/{address_id}", tags=["Addresses"])
    async def update_address(
        address_id: int,
        body: AddressPatchBody,
        user: User = Depends(current_user),
    ) -> dict[str, Any]:
        address = store.update_address(user.id, address_id, **body.model_dump())
        return {"address": dump(address)}

    @router.delete("/addresses/{address_id}", status_code=204, tags=["Addresses"])
    async def delete_address(address_id: int, user: User = Depends(current_user)) -> Response:
        store.delete_address(user.id, address_id)
        return Response(status_code=204)

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    @router.get("/categories", tags=["Categories"])
    async def list_categories() -> dict[str, Any]:
        categories = sorted(store.categories.values(), key=lambda c: c.name.lower())
        return {"categories": [dump(c) for c in categories]}

    @router.post("/categories", status_code=201, tags=["Categories"])
    async def create_category(body: CategoryBody, _: User = Depends(admin_user)) -> dict[str, Any]:
        return {"category": dump(store.create_category(body.name, body.description))}

    @router.patch("/categories/{category_id}", tags=["Categories"])
    async def update_category(
        category_id: int,
        body: CategoryPatchBody,
        _: User = Depends(admin_user),
    ) -> dict[str, Any]:
        return {"category": dump(store.update_category(category_id, **body.model_dump()))}

    @router.delete("/categories/{category_id}", status_code=204, tags=["Categories"])
    async def delete_category(category_id: int, _: User = Depends(admin_user)) -> Response:
        store.delete_category(category_id)
        return Response(status_code=204)

    # =========================================================================
    # ITEMS
    # =========================================================================

    @router.get("/items", tags=["Items"])
    async def list_items() -> dict[str, Any]:
        items = sorted(store.items.values(), key=lambda i: i.name.lower())
        return {"items": [dump(i) for i in items]}

    @router.get("/items/{item_id}", tags=["Items"])
    async def get_item(item_id: int) -> dict[str, Any]:
        return {"item": dump(store.get_item(item_id))}

    @router.post("/items", status_code=201, tags=["Items"])
    async def create_item(body: ItemBody, _: User = Depends(admin_user)) -> dict[str, Any]:
        return {"item": dump(store.create_item(**body.model_dump()))}

    @router.patch("/items/{item_id}", tags=["Items"])
    async def update_item(item_id: int, body: ItemPatchBody, _: User = Depends(admin_user)) -> dict[str, Any]:
        return {"item": dump(store.update_item(item_id, **body.model_dump()))}

    @router.delete("/items/{item_id}", status_code=204, tags=["Items"])
    async def delete_item(item_id: int, _: User = Depends(admin_user)) -> Response:
        store.delete_item(item_id)
        return Response(status_code=204)

    # =========================================================================
    # ORDERS
    # =========================================================================

    @router.get("/orders", tags=["Orders"])
    async def list_orders(
        page: int = Query(1, ge=1),
        page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
        _: User = Depends(admin_user),
    ) -> dict[str, Any]:
        orders = [store.with_relations(o) for o in store.list_orders()]
        return paginate(orders, page, page_size)

    @router.get("/orders/client/{client_id}", tags=["Orders"])
    async def list_client_orders(
        client_id: int,
        page: int = Query(1, ge=1),
        page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
        user: User = Depends(current_user),
    ) -> dict[str, Any]:
        if user.id != client_id and user.type != UserType.ADMIN:
            raise SandboxError(403, "Forbidden")
        return paginate(store.list_orders(client_id), page, page_size)

    @router.get("/orders/{order_id}", tags=["Orders"])
    async def get_order(order_id: int, user: User = Depends(current_user)) -> dict[str, Any]:
        order = store.get_order(order_id)
        if order.client_id != user.id and user.type != UserType.ADMIN:
            raise SandboxError(404, f"Order #{order_id} not found")
        return {"order": dump(store.with_relations(order))}

    @router.post("/orders", status_code=201, tags=["Orders"])
    async def create_order(body: OrderBody, user: User = Depends(current_user)) -> dict[str, Any]:
        if body.client_id != user.id and user.type != UserType.ADMIN:
            raise SandboxError(403, "Cannot place orders for another client")

        order = store.create_order(
            client_id=body.client_id,
            created_by_user_id=user.id,
            address_id=body.address_id,
            payment_method=body.payment_method,
            lines=[(line.item_id, line.quantity) for line in body.items],
        )
        if abs(order.total_amount - body.total_amount) > 0.009:
            logger.warning(
                f"Sandbox: order #{order.id} client total {body.total_amount:.2f} "
                f"differs from catalog total {order.total_amount:.2f}"
            )
        logger.info(f"Sandbox: order #{order.id} created for client #{order.client_id}")

        for admin_id in store.admin_ids():
            await hub.notify(
                admin_id,
                "New order",
                f"Order #{order.id} received ({order.total_amount:.2f})",
                {"orderId": order.id},
            )
        return {"order": dump(order)}

    @router.patch("/orders/{order_id}", tags=["Orders"])
    async def update_order(order_id: int, body: OrderPatchBody, _: User = Depends(admin_user)) -> dict[str, Any]:
        order = store.get_order(order_id)
        if body.status is not None and body.status != order.status:
            order = store.update_order_status(order_id, body.status)
            logger.info(f"Sandbox: order #{order_id} -> {order.status.value}")
            await hub.notify(
                order.client_id,
                "Order updated",
                f"Order #{order.id} is now {STATUS_LABELS[order.status]}",
                {"orderId": order.id, "status": order.status.value},
            )
        return {"order": dump(store.with_relations(order))}

    @router.delete("/orders/{order_id}", status_code=204, tags=["Orders"])
    async def delete_order(order_id: int, _: User = Depends(admin_user)) -> Response:
        store.delete_order(order_id)
        return Response(status_code=204)

    # =========================================================================
    # NOTIFICATIONS
    # =========================================================================

    @router.get("/notifications", tags=["Notifications"])
    async def list_notifications(user: User = Depends(current_user)) -> dict[str, Any]:
        return {"notifications": [dump(n) for n in store.list_notifications(user.id)]}

    @router.post("/notifications/read", tags=["Notifications"])
    async def mark_read(body: ReadBody, user: User = Depends(current_user)) -> dict[str, Any]:
        store.mark_read(user.id, body.id)
        await hub.publish_unread_count(user.id)
        return {"success": True, "unreadCount": store.unread_count(user.id)}

    @router.post("/notifications/read-all", tags=["Notifications"])
    async def mark_all_read(user: User = Depends(current_user)) -> dict[str, Any]:
        store.mark_all_read(user.id)
        await hub.publish_unread_count(user.id)
        return {"success": True, "unreadCount": 0}

    # =========================================================================
    # REALTIME
    # =========================================================================

    @router.websocket("/ws")
    async def realtime(websocket: WebSocket, token: Optional[str] = None) -> None:
        if store.user_for_access_token(token) is None:
            await websocket.close(code=1008)
            return

        await websocket.accept()

        async def forward(event: str, payload: Any) -> None:
            await websocket.send_json({"type": event, "payload": payload})

        detach = hub.attach(token, forward)
        user = store.user_for_access_token(token)
        try:
            await hub.publish_unread_count(user.id)
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.debug(f"Sandbox: realtime client of user #{user.id} disconnected")
        finally:
            detach()

    app.include_router(router)

    # =========================================================================
    # HEALTH
    # =========================================================================

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, Any]:
        return {
            "status": "operational",
            "users": len(store.users),
            "items": len(store.items),
            "orders": len(store.orders),
        }

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.exception_handler(SandboxError)
    async def sandbox_error_handler(request: Request, exc: SandboxError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = []
        for error in exc.errors():
            path = list(error.get("loc", ())[1:])
            message = error.get("msg", "Invalid value")
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            field = ".".join(str(p) for p in path)
            errors.append({
                "code": error.get("type", "invalid"),
                "path": path,
                "message": f"{field}: {message}" if field else message,
            })
        return JSONResponse(status_code=400, content={"errors": errors})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "message": str(exc) if debug else "Internal Server Error",
            },
        )

    return app
