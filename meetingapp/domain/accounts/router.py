"""Account router - Registration, login and account lookups"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...exceptions import AccountExistsError
from ...models import Account
from ...security_utils import create_access_token
from .schemas import AccountRegister, AccountResponse, EmailExistsResponse, LoginRequest, LoginResponse
from .service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Accounts"])


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    """Dependency injection for AccountService"""
    return AccountService(db)


@router.post("/auth/register", response_model=LoginResponse, status_code=201)
async def register(data: AccountRegister, service: AccountService = Depends(get_account_service)):
    """Create an account and open a session for it"""
    try:
        account = service.register(data.email, data.password, data.displayName, data.username)
    except AccountExistsError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    if not account:
        raise HTTPException(status_code=503, detail="Registration failed, please retry")
    return LoginResponse(
        access_token=create_access_token(account.id),
        account=AccountResponse.model_validate(account),
    )


@router.post("/auth/login", response_model=LoginResponse)
async def login(data: LoginRequest, service: AccountService = Depends(get_account_service)):
    account = service.login(data.email, data.password)
    if not account:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return LoginResponse(
        access_token=create_access_token(account.id),
        account=AccountResponse.model_validate(account),
    )


@router.get("/auth/me", response_model=AccountResponse)
async def me(current_user: Account = Depends(get_current_user)):
    return AccountResponse.model_validate(current_user)


@router.get("/accounts/exists", response_model=EmailExistsResponse)
async def email_exists(
    email: str = Query(...),
    _current_user: Account = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    """Check whether an email belongs to a registered account (collaborator picker)"""
    return EmailExistsResponse(email=email.strip().lower(), exists=service.check_email_exists(email))


@router.get("/accounts/lookup", response_model=AccountResponse)
async def lookup_account(
    email: str = Query(...),
    _current_user: Account = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    account = service.get_by_email(email)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return AccountResponse.model_validate(account)
