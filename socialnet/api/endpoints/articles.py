"""
Article API endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from socialnet.core.permissions import require_article_owner
from socialnet.core.security import get_current_user_id
from socialnet.dependencies import get_article_service
from socialnet.schemas.article import (
    ArticleCreateRequest,
    ArticleResponse,
    ArticleUpdateRequest,
)
from socialnet.schemas.common import DataResponse, MessageResponse
from socialnet.services.article_service import ArticleService

router = APIRouter(prefix="/articles", tags=["Articles"])


@router.get("", response_model=List[ArticleResponse], summary="List articles")
async def list_articles(
    author_id: Optional[int] = Query(None, alias="authorId"),
    current_user_id: int = Depends(get_current_user_id),
    article_service: ArticleService = Depends(get_article_service),
):
    return await article_service.find_all(current_user_id, author_id)


@router.get("/{id}", response_model=ArticleResponse, summary="Get an article")
async def get_article(
    id: int,
    current_user_id: int = Depends(get_current_user_id),
    article_service: ArticleService = Depends(get_article_service),
):
    return await article_service.find_by_id(id, current_user_id)


@router.post(
    "",
    response_model=DataResponse[ArticleResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Write an article",
)
async def create_article(
    article: ArticleCreateRequest,
    current_user_id: int = Depends(get_current_user_id),
    article_service: ArticleService = Depends(get_article_service),
):
    return await article_service.create_one(current_user_id, article.model_dump())


@router.put(
    "/{id}",
    response_model=DataResponse[ArticleResponse],
    dependencies=[Depends(require_article_owner)],
    summary="Edit an article",
)
async def update_article(
    id: int,
    article: ArticleUpdateRequest,
    current_user_id: int = Depends(get_current_user_id),
    article_service: ArticleService = Depends(get_article_service),
):
    return await article_service.update_one(
        id, article.model_dump(exclude_unset=True), viewer_id=current_user_id
    )


@router.delete(
    "/{id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_article_owner)],
    summary="Delete an article",
)
async def delete_article(id: int, article_service: ArticleService = Depends(get_article_service)):
    return await article_service.delete_one(id)


@router.post("/{id}/like", response_model=DataResponse[ArticleResponse])
async def like_article(
    id: int,
    current_user_id: int = Depends(get_current_user_id),
    article_service: ArticleService = Depends(get_article_service),
):
    return await article_service.like_one(id, current_user_id)


@router.delete("/{id}/like", response_model=DataResponse[ArticleResponse])
async def unlike_article(
    id: int,
    current_user_id: int = Depends(get_current_user_id),
    article_service: ArticleService = Depends(get_article_service),
):
    return await article_service.remove_like_one(id, current_user_id)
