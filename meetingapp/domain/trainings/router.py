"""Training router - FastAPI endpoints for trainings and collaborators"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import TRAINING_STATUSES, Account
from ...shared.results import raise_for_outcome
from .schemas import (
    CollaboratorAdd,
    CollaboratorAddResponse,
    CollaboratorResponse,
    TrainingCreate,
    TrainingOverviewResponse,
    TrainingResponse,
    TrainingStatusUpdate,
    TrainingUpdate,
)
from .service import TrainingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trainings", tags=["Trainings"])


def get_training_service(db: Session = Depends(get_db)) -> TrainingService:
    """Dependency injection for TrainingService"""
    return TrainingService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[TrainingResponse])
async def list_trainings(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="active, completed or cancelled"),
    current_user: Account = Depends(get_current_user),
    service: TrainingService = Depends(get_training_service),
):
    """Trainings the caller owns or collaborates on"""
    if status and status not in TRAINING_STATUSES:
        raise HTTPException(status_code=422, detail=f"status must be one of {', '.join(TRAINING_STATUSES)}")
    trainings = service.list_trainings(current_user, search=search, status=status)
    return [TrainingResponse.model_validate(t) for t in trainings]


@router.post("", response_model=TrainingResponse, status_code=201)
async def create_training(
    data: TrainingCreate,
    current_user: Account = Depends(get_current_user),
    service: TrainingService = Depends(get_training_service),
):
    fields = data.model_dump(exclude={"title", "collaborator_emails"})
    training = service.create_training(current_user, data.title, data.collaborator_emails, **fields)
    if not training:
        raise HTTPException(status_code=503, detail="Failed to create training")
    return TrainingResponse.model_validate(training)


@router.get("/overview", response_model=TrainingOverviewResponse)
async def training_overview(
    current_user: Account = Depends(get_current_user),
    service: TrainingService = Depends(get_training_service),
):
    """Active/completed counts and registrations per training"""
    return service.overview(current_user)


@router.get("/{training_id}", response_model=TrainingResponse)
async def get_training(
    training_id: str,
    current_user: Account = Depends(get_current_user),
    service: TrainingService = Depends(get_training_service),
):
    outcome, training = service.get_training(current_user, training_id)
    raise_for_outcome(outcome, "Training")
    return TrainingResponse.model_validate(training)


@router.patch("/{training_id}", response_model=TrainingResponse)
async def update_training(
    training_id: str,
    data: TrainingUpdate,
    current_user: Account = Depends(get_current_user),
    service: TrainingService = Depends(get_training_service),
):
    outcome, training = service.update_training(current_user, training_id, **data.model_dump(exclude_unset=True))
    raise_for_outcome(outcome, "Training")
    return TrainingResponse.model_validate(training)


@router.patch("/{training_id}/status", response_model=TrainingResponse)
async def update_training_status(
    training_id: str,
    data: TrainingStatusUpdate,
    current_user: Account = Depends(get_current_user),
    service: TrainingService = Depends(get_training_service),
):
    """Mark a training completed or cancelled"""
    outcome, training = service.update_status(current_user, training_id, data.status)
    raise_for_outcome(outcome, "Training", "A completed training cannot change status")
    return TrainingResponse.model_validate(training)


@router.delete("/{training_id}")
async def delete_training(
    training_id: str,
    current_user: Account = Depends(get_current_user),
    service: TrainingService = Depends(get_training_service),
):
    outcome = service.delete_training(current_user, training_id)
    raise_for_outcome(outcome, "Training")
    return {"message": "Training deleted"}


# ============================================================================
# COLLABORATORS
# ============================================================================


@router.get("/{training_id}/collaborators", response_model=list[CollaboratorResponse])
async def list_collaborators(
    training_id: str,
    current_user: Account = Depends(get_current_user),
    service: TrainingService = Depends(get_training_service),
):
    outcome, collaborators = service.list_collaborators(current_user, training_id)
    raise_for_outcome(outcome, "Training")
    return collaborators


@router.post("/{training_id}/collaborators", response_model=CollaboratorAddResponse)
async def add_collaborators(
    training_id: str,
    data: CollaboratorAdd,
    current_user: Account = Depends(get_current_user),
    service: TrainingService = Depends(get_training_service),
):
    """Share a training with registered accounts by email"""
    outcome, added = service.add_collaborators(current_user, training_id, data.emails)
    raise_for_outcome(outcome, "Training", "No new registered account among the given emails")
    return CollaboratorAddResponse(added=added)


@router.delete("/{training_id}/collaborators/{email}")
async def remove_collaborator(
    training_id: str,
    email: str,
    current_user: Account = Depends(get_current_user),
    service: TrainingService = Depends(get_training_service),
):
    outcome = service.remove_collaborator(current_user, training_id, email)
    raise_for_outcome(outcome, "Collaborator")
    return {"message": "Collaborator removed"}
