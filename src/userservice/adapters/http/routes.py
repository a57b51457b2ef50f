"""Routes for the users resource and the health probes."""

import re
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse

from ...application.services.user_service import UserService
from ...infrastructure.config.config_models import HTTPConfig
from ...infrastructure.health import HealthChecker, HealthResult
from .errors import error_response
from .schemas import (
    CreateUserRequest,
    ErrorResponse,
    ListUsersResponse,
    UpdateUserRequest,
    UserResponse,
)

router = APIRouter(prefix="/users", tags=["users"])
health_router = APIRouter(prefix="/health", tags=["health"])

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_user_service(request: Request) -> UserService:
    return request.app.state.container.user_service


def get_http_config(request: Request) -> HTTPConfig:
    return request.app.state.container.config.http


def get_health_checker(request: Request) -> HealthChecker:
    return request.app.state.container.health_checker


def _parse_int(raw: Optional[str]) -> Optional[int]:
    # Plain decimal only: no spaces, underscores or non-ASCII digits
    if raw is None or not _INTEGER_PATTERN.fullmatch(raw):
        return None
    return int(raw)


def parse_pagination(
    raw_limit: Optional[str],
    raw_offset: Optional[str],
    default_limit: int,
) -> Tuple[int, int]:
    """
    Read ``limit``/``offset`` query values.

    Missing, unparsable or out-of-range values fall back to the defaults
    (``default_limit`` and 0); the upper bound on limit is checked by the
    caller.
    """
    limit = _parse_int(raw_limit)
    if limit is None or limit <= 0:
        limit = default_limit

    offset = _parse_int(raw_offset)
    if offset is None or offset < 0:
        offset = 0

    return limit, offset


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
    summary="Create a user",
)
async def create_user(
    payload: CreateUserRequest,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await service.create_user(payload.email, payload.name)
    return UserResponse.model_validate(user)


@router.get(
    "",
    response_model=ListUsersResponse,
    responses=_ERROR_RESPONSES,
    summary="List users, newest first",
)
async def list_users(
    limit: Optional[str] = Query(None, description="Page size"),
    offset: Optional[str] = Query(None, description="Number of users to skip"),
    service: UserService = Depends(get_user_service),
    http_config: HTTPConfig = Depends(get_http_config),
):
    page_limit, page_offset = parse_pagination(limit, offset, http_config.default_page_size)

    if page_limit > http_config.max_page_size:
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            f"limit cannot exceed {http_config.max_page_size}",
        )

    users = await service.list_users(page_limit, page_offset)
    return ListUsersResponse(
        users=[UserResponse.model_validate(user) for user in users],
        limit=page_limit,
        offset=page_offset,
    )


# Registered before "/{user_id}" so an email is never read as an id
@router.get(
    "/email/{email}",
    response_model=UserResponse,
    responses=_ERROR_RESPONSES,
    summary="Get a user by email",
)
async def get_user_by_email(
    email: str,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await service.get_user_by_email(email)
    return UserResponse.model_validate(user)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses=_ERROR_RESPONSES,
    summary="Get a user by id",
)
async def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await service.get_user(user_id)
    return UserResponse.model_validate(user)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    responses=_ERROR_RESPONSES,
    summary="Rename a user",
)
async def update_user(
    user_id: str,
    payload: UpdateUserRequest,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await service.update_user(user_id, payload.name)
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_ERROR_RESPONSES,
    summary="Delete a user",
)
async def delete_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
) -> Response:
    await service.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _health_response(result: HealthResult) -> JSONResponse:
    status_code = status.HTTP_200_OK if result.healthy else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=result.to_dict())


@health_router.get("/live", summary="Liveness probe")
async def liveness(checker: HealthChecker = Depends(get_health_checker)) -> JSONResponse:
    return _health_response(checker.liveness())


@health_router.get("/ready", summary="Readiness probe")
async def readiness(checker: HealthChecker = Depends(get_health_checker)) -> JSONResponse:
    return _health_response(await checker.readiness())
