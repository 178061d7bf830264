"""Account service - Registration, login and email lookups"""

import logging
import re
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...exceptions import AccountExistsError, ValidationError
from ...models import Account
from ...security_utils import hash_password, mask_email, verify_password
from ...shared.validators import normalize_email, require_text, validate_email
from .repository import AccountRepository

logger = logging.getLogger(__name__)


class AccountService:
    """Service layer for account business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AccountRepository()

    def check_email_exists(self, email: str) -> bool:
        """True if a registered account uses this email"""
        email = normalize_email(email)
        if not email:
            return False
        try:
            return self.repo.get_by_email(self.db, email) is not None
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error checking email {mask_email(email)}: {e}")
            return False

    def get_by_email(self, email: str) -> Optional[Account]:
        email = normalize_email(email)
        if not email:
            return None
        try:
            return self.repo.get_by_email(self.db, email)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error fetching account {mask_email(email)}: {e}")
            return None

    def existing_emails(self, emails: list[str]) -> set[str]:
        """Registered subset of already-normalized emails; empty on storage failure"""
        try:
            return self.repo.existing_emails(self.db, emails)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error resolving collaborator emails: {e}")
            return set()

    def _unique_username(self, wanted: str) -> str:
        base = re.sub(r"[^a-zA-Z0-9_.-]", "", wanted) or "user"
        candidate = base
        suffix = 2
        while self.repo.get_by_username(self.db, candidate):
            candidate = f"{base}{suffix}"
            suffix += 1
        return candidate

    def register(
        self, email: str, password: str, display_name: str, username: Optional[str] = None
    ) -> Optional[Account]:
        """
        Register an account with a bcrypt-hashed password.

        Raises:
            ValidationError: Missing email, password or display name
            AccountExistsError: Email or explicit username already taken
        """
        email = require_text(email, "email")
        try:
            email = validate_email(email)
        except ValueError as e:
            raise ValidationError(str(e), field="email") from e
        require_text(password, "password")
        display_name = require_text(display_name, "display_name")

        try:
            if self.repo.get_by_email(self.db, email):
                raise AccountExistsError("An account with this email already exists")

            if username and username.strip():
                username = username.strip()
                if self.repo.get_by_username(self.db, username):
                    raise AccountExistsError("This username is already taken")
            else:
                username = self._unique_username(email.split("@")[0])

            account = self.repo.create_account(
                self.db,
                email=email,
                username=username,
                display_name=display_name,
                password_hash=hash_password(password),
            )
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Duplicate registration for {mask_email(email)}: {e}")
            raise AccountExistsError("An account with this email or username already exists") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error registering account {mask_email(email)}: {e}")
            return None

        logger.info(f"✅ Registered account {account.id} ({mask_email(email)})")
        return account

    def login(self, email: str, password: str) -> Optional[Account]:
        """Return the account when the password matches, None otherwise"""
        account = self.get_by_email(email)
        if not account or not verify_password(password, account.password_hash):
            logger.warning(f"🚫 Failed login for {mask_email(normalize_email(email))}")
            return None
        return account
