"""FastAPI application exposing CRUD endpoints for users."""
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .config import Settings, load_settings
from .errors import EmailConflictError, UserNotFoundError, ValidationError
from .models import User
from .request_logging import RequestLoggingMiddleware
from .security import DOCS_PREFIX, APIKeyMiddleware
from .service import UserService
from .store import UserStore
from .validation import AGE_MAX, AGE_MIN, EMAIL_MAX_LENGTH, NAME_MAX_LENGTH, NAME_MIN_LENGTH

logger = logging.getLogger("userapi.api")

USERS_PATH = "/api/users"
VALIDATION_TITLE = "One or more validation errors occurred."


class UserRequest(BaseModel):
    """Request body accepted by create and update (documentation only)."""

    name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    email: str = Field(..., max_length=EMAIL_MAX_LENGTH)
    age: int = Field(default=0, ge=AGE_MIN, le=AGE_MAX)


class UserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    age: int
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        age=user.age,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


_USER_BODY_DOCS: Dict[str, Any] = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"schema": UserRequest.model_json_schema()}},
    }
}


async def _read_json_body(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise ValidationError({"body": ["Request body must be valid JSON."]}) from exc


def create_app(
    *,
    settings: Settings | None = None,
    store: UserStore | None = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    if settings is None:
        settings = load_settings()
    if store is None:
        store = UserStore()

    service = UserService(store, clock=clock)
    if settings.seed_enabled:
        seeded = service.seed(settings.seed_users)
        if seeded:
            logger.info("Seeded %s sample user(s)", seeded)

    app = FastAPI(
        title="User Management API",
        description="CRUD endpoints for users guarded by a shared API key",
        version="1.0.0",
        docs_url=DOCS_PREFIX if settings.docs_enabled else None,
        openapi_url=f"{DOCS_PREFIX}/v1/swagger.json" if settings.docs_enabled else None,
        redoc_url=None,
    )
    # The last middleware added is the outermost: logging wraps the key gate.
    app.add_middleware(APIKeyMiddleware, api_key=settings.api_key)
    app.add_middleware(RequestLoggingMiddleware)
    app.state.store = store

    def get_service() -> UserService:
        return service

    router = APIRouter(prefix=USERS_PATH, tags=["users"])

    @router.get("", response_model=List[UserResponse])
    async def list_users(svc: UserService = Depends(get_service)) -> List[UserResponse]:
        return [user_to_response(user) for user in svc.list_users()]

    @router.get("/{user_id}", response_model=UserResponse)
    async def read_user(user_id: str, svc: UserService = Depends(get_service)) -> UserResponse:
        return user_to_response(svc.get_user(user_id))

    @router.post(
        "",
        response_model=UserResponse,
        status_code=status.HTTP_201_CREATED,
        openapi_extra=_USER_BODY_DOCS,
    )
    async def create_user(
        request: Request,
        response: Response,
        svc: UserService = Depends(get_service),
    ) -> UserResponse:
        payload = await _read_json_body(request)
        user = svc.create_user(payload)
        response.headers["Location"] = f"{USERS_PATH}/{user.id}"
        return user_to_response(user)

    @router.put("/{user_id}", response_model=UserResponse, openapi_extra=_USER_BODY_DOCS)
    async def update_user(
        user_id: str,
        request: Request,
        svc: UserService = Depends(get_service),
    ) -> UserResponse:
        payload = await _read_json_body(request)
        return user_to_response(svc.update_user(user_id, payload))

    @router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_user(user_id: str, svc: UserService = Depends(get_service)) -> Response:
        svc.delete_user(user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    app.include_router(router)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(_: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"title": VALIDATION_TITLE, "status": status.HTTP_400_BAD_REQUEST, "errors": exc.errors},
        )

    @app.exception_handler(UserNotFoundError)
    async def handle_not_found(_: Request, exc: UserNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "User not found."})

    @app.exception_handler(EmailConflictError)
    async def handle_email_conflict(_: Request, exc: EmailConflictError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"message": str(exc)})

    return app


__all__ = ["UserRequest", "UserResponse", "create_app", "user_to_response"]
