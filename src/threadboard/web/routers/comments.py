"""Comment-related API endpoints."""

from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel, Field

from threadboard.core.modules.discussion.models import DiscussionView
from threadboard.web.deps import AppDep, OptionalAuthTokenDep
from threadboard.web.openapi import ErrorResponse

router: APIRouter = APIRouter(tags=["comments"])


class CreateCommentRequest(BaseModel):
    """Request to create a new comment or reply."""

    content: str = Field(..., description="The comment text")
    parent_id: UUID | None = Field(None, description="Comment to reply to, omit for a top-level comment")


class EditCommentRequest(BaseModel):
    """Request to change the text of a comment."""

    content: str = Field(..., description="The new comment text")


@router.get(
    "/posts/{post_id}/comments",
    summary="Get discussion",
    description="Get all comments of a post as threads, replies nested under the comment they answer. Public.",
    operation_id="getDiscussion",
    responses={
        200: {"description": "Threaded comments"},
        404: {"model": ErrorResponse, "description": "Post not found"},
        500: {"model": ErrorResponse, "description": "Stored replies form a cycle"},
        503: {"model": ErrorResponse, "description": "Comment store unavailable"},
    },
)
async def get_discussion(post_id: UUID, app: AppDep, auth_token: OptionalAuthTokenDep) -> DiscussionView:
    return await app.get_discussion(auth_token, post_id)


@router.post(
    "/posts/{post_id}/comments",
    summary="Create comment",
    description="Add a comment to a post, or a reply when `parent_id` is set. Returns the reloaded discussion.",
    operation_id="createComment",
    status_code=201,
    responses={
        201: {"description": "Comment created, updated discussion returned"},
        400: {"model": ErrorResponse, "description": "Empty comment"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Post not found"},
        409: {"model": ErrorResponse, "description": "Replied-to comment no longer exists"},
        503: {"model": ErrorResponse, "description": "Comment store unavailable"},
    },
)
async def create_comment(
    post_id: UUID, request: CreateCommentRequest, app: AppDep, auth_token: OptionalAuthTokenDep
) -> DiscussionView:
    return await app.create_comment(auth_token, post_id, request.content, request.parent_id)


@router.patch(
    "/posts/{post_id}/comments/{comment_id}",
    summary="Edit comment",
    description="Replace the text of a comment. Only its author can edit it.",
    operation_id="editComment",
    responses={
        200: {"description": "Comment updated, updated discussion returned"},
        400: {"model": ErrorResponse, "description": "Empty comment"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not the author of this comment"},
        404: {"model": ErrorResponse, "description": "Post or comment not found"},
    },
)
async def edit_comment(
    post_id: UUID, comment_id: UUID, request: EditCommentRequest, app: AppDep, auth_token: OptionalAuthTokenDep
) -> DiscussionView:
    return await app.edit_comment(auth_token, post_id, comment_id, request.content)


@router.delete(
    "/posts/{post_id}/comments/{comment_id}",
    summary="Delete comment",
    description=(
        "Delete a comment together with all replies below it. "
        "Allowed for the comment author and for the author of the post."
    ),
    operation_id="deleteComment",
    responses={
        200: {"description": "Comment deleted, updated discussion returned"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Neither comment author nor post author"},
        404: {"model": ErrorResponse, "description": "Post or comment not found"},
    },
)
async def delete_comment(
    post_id: UUID, comment_id: UUID, app: AppDep, auth_token: OptionalAuthTokenDep
) -> DiscussionView:
    return await app.delete_comment(auth_token, post_id, comment_id)
