"""Registration router - Public sign-up form and registration management"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Account
from ...shared.results import raise_for_outcome
from ..trainings.router import get_training_service
from ..trainings.service import TrainingService
from .schemas import RegistrationCreate, RegistrationListResponse, RegistrationResponse, RegistrationStatusUpdate
from .service import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Registrations"])


def get_registration_service(db: Session = Depends(get_db)) -> RegistrationService:
    """Dependency injection for RegistrationService"""
    return RegistrationService(db)


@router.post("/trainings/{training_id}/registrations", response_model=RegistrationResponse, status_code=201)
async def register_for_training(
    training_id: str,
    data: RegistrationCreate,
    service: RegistrationService = Depends(get_registration_service),
):
    """Public endpoint - no account required"""
    outcome, registration = service.register(training_id, **data.model_dump())
    raise_for_outcome(outcome, "Training", "Registration is closed for this training")
    return RegistrationResponse.model_validate(registration)


@router.get("/trainings/{training_id}/registrations", response_model=RegistrationListResponse)
async def list_registrations(
    training_id: str,
    search: Optional[str] = Query(None),
    current_user: Account = Depends(get_current_user),
    service: RegistrationService = Depends(get_registration_service),
    trainings: TrainingService = Depends(get_training_service),
):
    """Registrations of a training the caller can manage"""
    outcome, _ = trainings.get_training(current_user, training_id)
    raise_for_outcome(outcome, "Training")

    outcome, presented = service.grouped_by_training(training_id, search)
    raise_for_outcome(outcome, "Training")
    return presented


@router.patch("/registrations/{registration_id}", response_model=RegistrationResponse)
async def update_registration_status(
    registration_id: str,
    data: RegistrationStatusUpdate,
    _current_user: Account = Depends(get_current_user),
    service: RegistrationService = Depends(get_registration_service),
):
    outcome, registration = service.update_status(registration_id, data.status)
    raise_for_outcome(outcome, "Registration")
    return RegistrationResponse.model_validate(registration)


@router.delete("/registrations/{registration_id}")
async def delete_registration(
    registration_id: str,
    _current_user: Account = Depends(get_current_user),
    service: RegistrationService = Depends(get_registration_service),
):
    outcome = service.delete_registration(registration_id)
    raise_for_outcome(outcome, "Registration")
    return {"message": "Registration deleted"}
