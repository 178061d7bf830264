import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import get_db
from .models import Account
from .security_utils import decode_access_token

logger = logging.getLogger(__name__)

security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Account:
    """Resolve the bearer session token to the calling account"""
    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired session token")

    try:
        account = db.query(Account).filter(Account.id == payload["sub"]).first()
    except SQLAlchemyError as e:
        logger.error(f"❌ Error loading account for session: {e}")
        raise HTTPException(status_code=503, detail="Storage unavailable, please retry") from e

    if not account:
        logger.warning(f"🚫 Session token for unknown account {payload['sub']}")
        raise HTTPException(status_code=401, detail="Account no longer exists")
    return account
