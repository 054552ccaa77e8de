from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from pizzago.data.models.account import AccountModel
from pizzago.data.models.email_verification import EmailVerificationModel


class AccountRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_account(self, account_id: int) -> AccountModel | None:
        return self.db.get(AccountModel, account_id)

    def get_by_email(self, email: str) -> AccountModel | None:
        return self.db.execute(select(AccountModel).where(AccountModel.email == email)).scalar_one_or_none()

    def create_account(self, account: AccountModel, verification: EmailVerificationModel) -> AccountModel:
        self.db.add(account)
        self.db.flush()
        verification.user_id = account.id
        self.db.add(verification)
        self.db.commit()
        self.db.refresh(account)
        return account

    def replace_verifications(self, account: AccountModel, verification: EmailVerificationModel) -> None:
        self.db.execute(delete(EmailVerificationModel).where(EmailVerificationModel.user_id == account.id))
        verification.user_id = account.id
        self.db.add(verification)
        self.db.commit()

    def get_live_verification(self, token: str, now: datetime) -> EmailVerificationModel | None:
        return self.db.execute(
            select(EmailVerificationModel).where(
                EmailVerificationModel.token == token,
                EmailVerificationModel.expires_at > now,
            )
        ).scalar_one_or_none()

    def mark_verified(self, account: AccountModel, verification: EmailVerificationModel) -> None:
        account.verified = True
        self.db.delete(verification)
        self.db.commit()

    def purge_expired_verifications(self, now: datetime) -> int:
        result = self.db.execute(delete(EmailVerificationModel).where(EmailVerificationModel.expires_at <= now))
        self.db.commit()
        return result.rowcount
