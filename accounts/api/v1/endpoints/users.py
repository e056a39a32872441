"""User API: thin routes delegating to UserService, wrapped in ServiceResponse."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile
from fastapi.responses import StreamingResponse

from accounts.api.v1.dependencies import (
    get_current_caller,
    get_user_service,
    get_user_service_for_write,
)
from accounts.application.dtos.user import Caller
from accounts.application.services.user_service import PictureUpload, UserService
from accounts.core.limiter import limit_password_change, limit_upload, limit_writes
from accounts.schemas.common import ServiceResponse
from accounts.schemas.user import (
    PICTURE_ACTION_PATTERN,
    PasswordUpdateRequest,
    UserResponse,
    UserUpdateRequest,
)

router = APIRouter()

CallerDep = Annotated[Caller | None, Depends(get_current_caller)]
ReadService = Annotated[UserService, Depends(get_user_service)]
WriteService = Annotated[UserService, Depends(get_user_service_for_write)]

_AUTH_RESPONSES = {
    401: {"description": "You are not authorized to view the resource"},
    403: {"description": "You don't have the right to access to this resource"},
}


def _ok(user) -> ServiceResponse[UserResponse]:
    return ServiceResponse[UserResponse](status=200, data=UserResponse.model_validate(user))


@router.get(
    "",
    response_model=ServiceResponse[list[UserResponse]],
    responses=_AUTH_RESPONSES,
)
async def list_users(caller: CallerDep, service: ReadService):
    """List all users (ADMIN)."""
    users = await service.list_users(caller)
    return ServiceResponse[list[UserResponse]](
        status=200, data=[UserResponse.model_validate(u) for u in users]
    )


@router.get(
    "/me",
    response_model=ServiceResponse[UserResponse],
    responses={401: _AUTH_RESPONSES[401], 404: {"description": "User not found"}},
)
async def get_current_user(caller: CallerDep, service: ReadService):
    """Return the authenticated user."""
    return _ok(await service.get_current_user(caller))


@router.get(
    "/{user_id}",
    response_model=ServiceResponse[UserResponse],
    responses={**_AUTH_RESPONSES, 404: {"description": "User not found"}},
)
async def get_user(user_id: str, caller: CallerDep, service: ReadService):
    """Get one user by id (ADMIN or USER)."""
    return _ok(await service.get_user(caller, user_id))


@router.put(
    "/{user_id}",
    response_model=ServiceResponse[UserResponse],
    responses={**_AUTH_RESPONSES, 404: {"description": "User not found"}},
)
@limit_writes
async def update_user(
    request: Request,
    user_id: str,
    body: UserUpdateRequest,
    caller: CallerDep,
    service: WriteService,
):
    """Update the fields present in the body; others are left unchanged."""
    changes = body.model_dump(exclude_unset=True)
    return _ok(await service.update_user(caller, user_id, changes))


@router.put(
    "/{user_id}/password",
    response_model=ServiceResponse[UserResponse],
    responses={
        **_AUTH_RESPONSES,
        400: {"description": "The current password is invalid"},
        404: {"description": "User not found"},
    },
)
@limit_password_change
async def update_password(
    request: Request,
    user_id: str,
    body: PasswordUpdateRequest,
    caller: CallerDep,
    service: WriteService,
):
    """Change password after verifying the current one."""
    user = await service.update_password(
        caller, user_id, body.current_password, body.new_password
    )
    return _ok(user)


@router.delete(
    "/{user_id}",
    status_code=204,
    response_class=Response,
    responses={**_AUTH_RESPONSES, 404: {"description": "User not found"}},
)
@limit_writes
async def delete_user(
    request: Request,
    user_id: str,
    caller: CallerDep,
    service: WriteService,
) -> Response:
    """Delete a user (ADMIN)."""
    await service.delete_user(caller, user_id)
    return Response(status_code=204)


@router.post(
    "/{user_id}/picture",
    response_model=ServiceResponse[UserResponse],
    responses={
        **_AUTH_RESPONSES,
        400: {"description": "The picture could not be stored or deleted"},
        404: {"description": "User not found"},
    },
)
@limit_upload
async def update_picture(
    request: Request,
    user_id: str,
    caller: CallerDep,
    service: WriteService,
    action: str = Form(
        ...,
        max_length=1,
        pattern=PICTURE_ACTION_PATTERN,
        description='"u" to upload, "d" to delete',
    ),
    file: UploadFile | None = File(None),
):
    """Upload (action 'u') or delete (action 'd') the user's picture."""
    upload = None
    if file is not None and file.filename:
        upload = PictureUpload(
            file_data=file.file,
            filename=file.filename,
            content_type=file.content_type or "application/octet-stream",
        )
    return _ok(await service.update_picture(caller, user_id, action, upload))


@router.get(
    "/{user_id}/picture",
    response_class=StreamingResponse,
    responses={**_AUTH_RESPONSES, 404: {"description": "User or picture not found"}},
)
async def get_picture(user_id: str, caller: CallerDep, service: ReadService):
    """Stream the user's picture."""
    stored, content = await service.get_picture(caller, user_id)
    return StreamingResponse(
        content,
        media_type=stored.content_type,
        headers={"Content-Length": str(stored.size)},
    )
