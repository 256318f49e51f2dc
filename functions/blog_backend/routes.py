"""
HTTP routes for the posts API.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from blog_backend.dependencies import get_post_store
from blog_backend.posts import PostStore, PostValidationError
from blog_backend.schemas import MessageResponse, PostCreateRequest, PostResponse

router = APIRouter()


@router.head("/posts")
def probe_posts():
    """Cheap availability check used by clients before calling the API."""
    return Response(status_code=200)


@router.get("/posts", response_model=list[PostResponse])
def list_posts(posts: PostStore = Depends(get_post_store)):
    return posts.list_posts()


@router.get("/posts/{post_id}", response_model=PostResponse)
def get_post(post_id: str, posts: PostStore = Depends(get_post_store)):
    post = posts.get_post(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.post("/posts", response_model=PostResponse, status_code=201)
def create_post(
    payload: PostCreateRequest, posts: PostStore = Depends(get_post_store)
):
    try:
        return posts.create_post(payload)
    except PostValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/posts/{post_id}", response_model=MessageResponse)
def delete_post(post_id: str, posts: PostStore = Depends(get_post_store)):
    if not posts.delete_post(post_id):
        raise HTTPException(status_code=404, detail="Post not found")
    return MessageResponse(message="Post deleted successfully")
