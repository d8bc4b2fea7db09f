"""Saved idea routes (no deletion)."""

from fastapi import APIRouter, status

from core.exceptions import MissingTitleError
from crud.ideas import saved_idea_crud
from dependencies.auth import CurrentUser
from dependencies.db import DbSession
from schemas.api import ApiResponse
from schemas.ideas import SavedIdeaCreate, SavedIdeaOut


router = APIRouter(prefix="/ideas", tags=["ideas"])


@router.post(
    "/save",
    response_model=ApiResponse[SavedIdeaOut],
    status_code=status.HTTP_201_CREATED,
)
async def save_idea(
    payload: SavedIdeaCreate, db: DbSession, current_user: CurrentUser
) -> ApiResponse[SavedIdeaOut]:
    """Save an idea, or merge into the one titled ``_mergeTitle``.

    A merge only overwrites fields that are non-empty in the payload, so a
    roadmap can be attached to an idea saved earlier without losing its
    description or pitch deck. Saving a title the user already has is a
    merge too, since titles are unique per user.
    """
    if not payload.title:
        raise MissingTitleError()

    data = payload.model_dump(exclude={"merge_title"})
    merge_title = payload.merge_title
    if not merge_title and await saved_idea_crud.get_by_title(
        db, current_user.id, payload.title
    ):
        merge_title = payload.title

    if merge_title:
        idea = await saved_idea_crud.find_and_merge_by_key(
            db, current_user.id, merge_title, data
        )
        message = "Idea updated"
    else:
        idea = await saved_idea_crud.create(db, current_user.id, data)
        message = "Idea saved"

    return ApiResponse(
        success=True, data=SavedIdeaOut.model_validate(idea), message=message
    )


@router.get("/favorites", response_model=ApiResponse[list[SavedIdeaOut]])
async def list_favorites(
    db: DbSession, current_user: CurrentUser
) -> ApiResponse[list[SavedIdeaOut]]:
    ideas = await saved_idea_crud.list_favorites(db, current_user.id)
    return ApiResponse(
        success=True, data=[SavedIdeaOut.model_validate(i) for i in ideas]
    )


@router.get("", response_model=ApiResponse[list[SavedIdeaOut]])
async def list_ideas(
    db: DbSession, current_user: CurrentUser
) -> ApiResponse[list[SavedIdeaOut]]:
    ideas = await saved_idea_crud.list_for_user(db, current_user.id)
    return ApiResponse(
        success=True, data=[SavedIdeaOut.model_validate(i) for i in ideas]
    )
