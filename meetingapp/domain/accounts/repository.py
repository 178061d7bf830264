"""Account repository - Database operations for accounts"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Account


class AccountRepository:
    """Repository for account database operations"""

    @staticmethod
    def get_by_id(db: Session, account_id: str) -> Optional[Account]:
        return db.query(Account).filter(Account.id == account_id).first()

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[Account]:
        """Get an account by email (case-insensitive)"""
        return db.query(Account).filter(func.lower(Account.email) == email.lower()).first()

    @staticmethod
    def get_by_username(db: Session, username: str) -> Optional[Account]:
        return db.query(Account).filter(Account.username == username).first()

    @staticmethod
    def existing_emails(db: Session, emails: list[str]) -> set[str]:
        """Subset of `emails` (lower-case) that belong to registered accounts"""
        if not emails:
            return set()
        rows = db.query(func.lower(Account.email)).filter(func.lower(Account.email).in_(emails)).all()
        return {row[0] for row in rows}

    @staticmethod
    def create_account(db: Session, **account_data) -> Account:
        account = Account(**account_data)
        db.add(account)
        db.commit()
        db.refresh(account)
        return account
