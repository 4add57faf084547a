from fastapi import APIRouter, Depends, Query, status

from weekgrid.api.deps import edit_mode_flag, get_store
from weekgrid.core.exceptions import PermissionDeniedError
from weekgrid.models.arrangement import ArrangementKind, Generation
from weekgrid.schemas.arrangement import (
    ArrangementOut,
    CreatedOut,
    MessageOut,
    SpecialCareCreate,
    SpecialCareUpdate,
)
from weekgrid.services.reconciliation import ReconciliationStore

router = APIRouter()


@router.get("/schedule/{schedule_id}", response_model=list[ArrangementOut])
def list_special_care(
    schedule_id: int,
    week: int | None = Query(default=None, ge=1),
    original: bool = Query(default=False),
    store: ReconciliationStore = Depends(get_store),
) -> list[ArrangementOut]:
    if week is not None and not original:
        rows = store.week_view(schedule_id, week).special_care
    else:
        rows = store.list_special_care(schedule_id, generation=Generation.from_flag(original))
    return [ArrangementOut.model_validate(row) for row in rows]


@router.post("/", response_model=CreatedOut, status_code=status.HTTP_201_CREATED)
def create_special_care(
    payload: SpecialCareCreate,
    store: ReconciliationStore = Depends(get_store),
) -> CreatedOut:
    arrangement = store.create(payload.to_draft(), edit_mode=payload.is_edit_mode)
    return CreatedOut(id=arrangement.id, is_original=arrangement.is_original, message="Special care created")


@router.put("/{care_id}", response_model=ArrangementOut)
def update_special_care(
    care_id: int,
    payload: SpecialCareUpdate,
    edit_mode: bool = Depends(edit_mode_flag),
    store: ReconciliationStore = Depends(get_store),
) -> ArrangementOut:
    if store.get(care_id, ArrangementKind.special_care).is_original and not edit_mode:
        raise PermissionDeniedError(
            "Original special care can only be changed in edit mode",
            details={"care_id": care_id},
        )
    arrangement = store.update_special_care(care_id, payload.model_dump(exclude_unset=True))
    return ArrangementOut.model_validate(arrangement)


@router.delete("/{care_id}", response_model=MessageOut)
def delete_special_care(
    care_id: int,
    edit_mode: bool = Depends(edit_mode_flag),
    store: ReconciliationStore = Depends(get_store),
) -> MessageOut:
    store.get(care_id, ArrangementKind.special_care)
    if not edit_mode:
        raise PermissionDeniedError(
            "Special care can only be deleted in edit mode",
            details={"care_id": care_id},
        )
    store.delete(care_id, ArrangementKind.special_care)
    return MessageOut(message="Special care deleted", changes=1)
