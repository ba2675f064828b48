"""
Combo router.
Thin controller over the combo domain services.
"""

from typing import Any, TypeVar

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context, optional_user_context
from shared.utils.combo_schemas import (
    ComboCalculationRequest,
    ComboCreate,
    ComboOutput,
    ComboPricingResult,
    ComboSelectionOutput,
    ComboUpdate,
)
from shared.utils.exceptions import ForbiddenError
from rest_api.services.domain import (
    ComboPricingService,
    ComboSelectionService,
    ComboService,
)
from rest_api.services.permissions import Actor, Denied


router = APIRouter(prefix="/api/combos", tags=["combos"])

T = TypeVar("T")


def _ensure_allowed(result: T | Denied, actor: Actor) -> T:
    if isinstance(result, Denied):
        raise ForbiddenError("manage combos of this restaurant", reason=result.reason, user_id=actor.user_id)
    return result


@router.get("", response_model=list[ComboOutput])
def list_combos(
    restaurant_id: int | None = Query(default=None),
    available: bool | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[ComboOutput]:
    """List active combos, optionally filtered by restaurant and availability."""
    combos = ComboService(db).list_all(restaurant_id=restaurant_id, available=available)
    return [ComboOutput.model_validate(combo) for combo in combos]


@router.get("/{combo_id}", response_model=ComboOutput)
def get_combo(combo_id: int, db: Session = Depends(get_db)) -> ComboOutput:
    """Get a combo with its groups, items, dishes and dish options."""
    combo = ComboService(db).get(combo_id)
    return ComboOutput.model_validate(combo)


@router.post("", response_model=ComboOutput, status_code=status.HTTP_201_CREATED)
def create_combo(
    body: ComboCreate,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> ComboOutput:
    """Create a combo, optionally with its full group structure."""
    actor = Actor.from_claims(ctx)
    combo = _ensure_allowed(ComboService(db).create(body, actor), actor)
    return ComboOutput.model_validate(combo)


@router.put("/{combo_id}", response_model=ComboOutput)
def update_combo(
    combo_id: int,
    body: ComboUpdate,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> ComboOutput:
    """
    Update a combo.

    When `groups` is present it is the complete desired structure: groups
    and items without an id are created, persisted ones not referenced are
    deleted.
    """
    actor = Actor.from_claims(ctx)
    combo = _ensure_allowed(ComboService(db).update(combo_id, body, actor), actor)
    return ComboOutput.model_validate(combo)


@router.delete("/{combo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_combo(
    combo_id: int,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> Response:
    """Delete a combo and its whole group structure."""
    actor = Actor.from_claims(ctx)
    _ensure_allowed(ComboService(db).delete_combo(combo_id, actor), actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{combo_id}/calculate", response_model=ComboPricingResult)
def calculate_combo(
    combo_id: int,
    body: ComboCalculationRequest,
    db: Session = Depends(get_db),
) -> ComboPricingResult:
    """Price a selection without recording it. No authentication required."""
    return ComboPricingService(db).calculate(combo_id, body)


@router.post(
    "/{combo_id}/selections",
    response_model=ComboSelectionOutput,
    status_code=status.HTTP_201_CREATED,
)
def record_selection(
    combo_id: int,
    body: ComboCalculationRequest,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] | None = Depends(optional_user_context),
) -> ComboSelectionOutput:
    """
    Price a selection and record it as an immutable snapshot.

    The caller's identity is attached when a bearer token is present.
    """
    actor = Actor.from_claims(ctx)
    selection = ComboSelectionService(db).calculate_and_record(combo_id, body, actor.user_id)
    return ComboSelectionOutput.model_validate(selection)
