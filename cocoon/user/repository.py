"""Persistence for User documents."""

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from cocoon.core.mixins import utc_now
from cocoon.db.mongo import Collections
from cocoon.user.exceptions import EmailExistsError
from cocoon.user.models import OAuthProvider, User


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    def __init__(self, db: Database):
        self._collection = db[Collections.USERS]

    def get_by_id(self, user_id: ObjectId) -> User | None:
        return User.from_mongo(self._collection.find_one({"_id": user_id}))

    def get_by_email(self, email: str) -> User | None:
        return User.from_mongo(
            self._collection.find_one({"user_email": normalize_email(email)})
        )

    def email_exists(self, email: str) -> bool:
        return (
            self._collection.count_documents(
                {"user_email": normalize_email(email)}, limit=1
            )
            > 0
        )

    def get_by_federated_subject(
        self, provider: OAuthProvider, subject: str
    ) -> User | None:
        return User.from_mongo(
            self._collection.find_one(
                {
                    "account_kind.kind": "federated",
                    "account_kind.provider": provider.value,
                    "account_kind.subject": subject,
                }
            )
        )

    def insert(self, user: User) -> User:
        """Insert a new user.

        Raises:
            EmailExistsError: If the unique email index rejects the insert
        """
        doc = user.to_mongo()
        doc["user_email"] = normalize_email(doc["user_email"])
        try:
            self._collection.insert_one(doc)
        except DuplicateKeyError as e:
            raise EmailExistsError() from e
        return User.model_validate(doc)

    def mark_email_verified(self, user_id: ObjectId) -> None:
        self._collection.update_one(
            {"_id": user_id},
            {"$set": {"is_email_verified": True, "updatedAt": utc_now()}},
        )

    def set_refresh_token(self, user_id: ObjectId, refresh_token: str | None) -> None:
        """Replace the stored refresh token (last write wins)."""
        self._collection.update_one(
            {"_id": user_id},
            {"$set": {"refresh_token": refresh_token, "updatedAt": utc_now()}},
        )

    def rotate_refresh_token(
        self, user_id: ObjectId, presented: str, replacement: str
    ) -> User | None:
        """Swap the stored refresh token only if it still equals ``presented``.

        Returns the updated user, or None when the presented token is no
        longer the stored one.
        """
        doc = self._collection.find_one_and_update(
            {"_id": user_id, "refresh_token": presented},
            {"$set": {"refresh_token": replacement, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        return User.from_mongo(doc)
