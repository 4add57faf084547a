import logging

from fastapi import APIRouter, Depends, status

from weekgrid.api.deps import edit_mode_flag, get_store
from weekgrid.core.exceptions import PermissionDeniedError
from weekgrid.models.arrangement import ArrangementKind
from weekgrid.schemas.arrangement import (
    ArrangementOut,
    CourseCreate,
    CourseMove,
    CourseUpdate,
    CreatedOut,
    MessageOut,
    MoveOut,
)
from weekgrid.services.reconciliation import ReconciliationStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/", response_model=CreatedOut, status_code=status.HTTP_201_CREATED)
def create_course(payload: CourseCreate, store: ReconciliationStore = Depends(get_store)) -> CreatedOut:
    arrangement = store.create(payload.to_draft(), edit_mode=payload.is_edit_mode)
    return CreatedOut(id=arrangement.id, is_original=arrangement.is_original, message="Course created")


@router.put("/{course_id}", response_model=ArrangementOut)
def update_course(
    course_id: int,
    payload: CourseUpdate,
    edit_mode: bool = Depends(edit_mode_flag),
    store: ReconciliationStore = Depends(get_store),
) -> ArrangementOut:
    if store.get(course_id, ArrangementKind.regular).is_original and not edit_mode:
        raise PermissionDeniedError(
            "Original courses can only be changed in edit mode",
            details={"course_id": course_id},
        )
    arrangement = store.update_course(course_id, payload.model_dump(exclude_unset=True))
    return ArrangementOut.model_validate(arrangement)


@router.put("/{course_id}/move", response_model=MoveOut)
def move_course(
    course_id: int,
    payload: CourseMove,
    store: ReconciliationStore = Depends(get_store),
) -> MoveOut:
    result = store.move(course_id, payload.weekday, payload.time_slot, schedule_id=payload.schedule_id)
    message = "Working copy created, original kept" if result.original_kept else "Course moved"
    return MoveOut(message=message, course_id=result.arrangement.id, original_kept=result.original_kept)


@router.delete("/{course_id}", response_model=MessageOut)
def delete_course(
    course_id: int,
    edit_mode: bool = Depends(edit_mode_flag),
    store: ReconciliationStore = Depends(get_store),
) -> MessageOut:
    arrangement = store.get(course_id, ArrangementKind.regular)
    if arrangement.is_original and not edit_mode:
        raise PermissionDeniedError(
            "Original courses can only be deleted in edit mode",
            details={"course_id": course_id},
        )
    store.delete(course_id, ArrangementKind.regular)
    logger.info("COURSE DELETED | course_id=%s | original=%s", course_id, arrangement.is_original)
    return MessageOut(message="Course deleted", changes=1)
