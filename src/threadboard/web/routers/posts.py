from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from threadboard.core.modules.post.models import Post
from threadboard.core.pagination import PaginationResult
from threadboard.web.deps import AppDep, AuthTokenDep
from threadboard.web.openapi import ErrorResponse

router: APIRouter = APIRouter(tags=["posts"])


class CreatePostRequest(BaseModel):
    """Request to create a new post."""

    title: str = Field(..., description="Post title")
    content: str = Field(..., description="Post body")
    image_url: str | None = Field(None, description="Optional URL of an image already uploaded to storage")


class UpdatePostRequest(BaseModel):
    """Request to update a post. Only provided fields are changed."""

    title: str | None = Field(None, description="New title")
    content: str | None = Field(None, description="New body")
    image_url: str | None = Field(None, description="New image URL, empty string removes the image")


@router.get(
    "/posts",
    summary="List posts",
    description="Get posts newest first. Use `q` to keep only posts whose title contains the text (case-insensitive).",
    operation_id="listPosts",
    responses={200: {"description": "Paginated list of posts"}},
)
async def list_posts(
    app: AppDep,
    q: Annotated[str | None, Query(description="Text to search for in post titles")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Maximum items to return")] = 50,
    offset: Annotated[int, Query(ge=0, description="Number of items to skip")] = 0,
) -> PaginationResult[Post]:
    return await app.list_posts(q, limit, offset)


@router.get(
    "/posts/{post_id}",
    summary="Get post",
    description="Get a single post by ID.",
    operation_id="getPost",
    responses={
        200: {"description": "Post details"},
        404: {"model": ErrorResponse, "description": "Post not found"},
    },
)
async def get_post(post_id: UUID, app: AppDep) -> Post:
    return await app.get_post(post_id)


@router.post(
    "/posts",
    summary="Create post",
    description="Create a new post authored by the current user.",
    operation_id="createPost",
    status_code=201,
    responses={
        201: {"description": "Post created successfully"},
        400: {"model": ErrorResponse, "description": "Title or content missing"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def create_post(request: CreatePostRequest, app: AppDep, auth_token: AuthTokenDep) -> Post:
    return await app.create_post(auth_token, request.title, request.content, request.image_url)


@router.patch(
    "/posts/{post_id}",
    summary="Update post",
    description="Partially update a post. Only the author of the post can update it.",
    operation_id="updatePost",
    responses={
        200: {"description": "Post updated successfully"},
        400: {"model": ErrorResponse, "description": "Empty title or content"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not the author of this post"},
        404: {"model": ErrorResponse, "description": "Post not found"},
    },
)
async def update_post(post_id: UUID, request: UpdatePostRequest, app: AppDep, auth_token: AuthTokenDep) -> Post:
    return await app.update_post(auth_token, post_id, request.title, request.content, request.image_url)


@router.delete(
    "/posts/{post_id}",
    summary="Delete post",
    description="Delete a post together with all its comments. Only the author of the post can delete it.",
    operation_id="deletePost",
    status_code=204,
    responses={
        204: {"description": "Post deleted"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not the author of this post"},
        404: {"model": ErrorResponse, "description": "Post not found"},
    },
)
async def delete_post(post_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.delete_post(auth_token, post_id)
