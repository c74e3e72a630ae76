"""
User administration service (app_users table).

Passwords are stored as bcrypt hashes.
"""

import bcrypt
from typing import Optional
import structlog

from config import get_supabase_client
from models.user import (
    UserCreate,
    UserUpdate,
    UserResponse,
)
from exceptions import (
    DatabaseError,
    PasswordRequiredError,
    SelfDeletionError,
    UsernameExistsError,
    UserNotFoundError,
)

logger = structlog.get_logger(__name__)


def hash_password(password: str) -> str:
    """Hash a password for storage."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


class UserService:
    """
    User business logic.

    Handles CRUD operations for application users.
    """

    # Never select the password column
    COLUMNS = "id,name,username,role"

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "app_users"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(self) -> list[UserResponse]:
        """All users, by name."""
        logger.info("getting_users")
        try:
            result = self.db.table(self.table).select(self.COLUMNS).order("name").execute()
            return [UserResponse(**row) for row in result.data]
        except Exception as e:
            logger.error("get_users_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def get_by_id(self, user_id: str) -> UserResponse:
        """
        Get a single user by ID.

        Raises:
            UserNotFoundError: If user doesn't exist
        """
        try:
            result = (
                self.db.table(self.table)
                .select(self.COLUMNS)
                .eq("id", user_id)
                .execute()
            )

            if not result.data:
                raise UserNotFoundError(user_id)

            return UserResponse(**result.data[0])

        except UserNotFoundError:
            raise
        except Exception as e:
            logger.error("get_user_failed", user_id=user_id, error=str(e))
            raise DatabaseError("select", str(e))

    def get_by_username(self, username: str) -> Optional[UserResponse]:
        """User with this username, or None."""
        try:
            result = (
                self.db.table(self.table)
                .select(self.COLUMNS)
                .eq("username", username)
                .execute()
            )
            if not result.data:
                return None
            return UserResponse(**result.data[0])
        except Exception as e:
            logger.error("get_user_by_username_failed", username=username, error=str(e))
            raise DatabaseError("select", str(e))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, data: UserCreate) -> UserResponse:
        """
        Create a user.

        Raises:
            PasswordRequiredError: If no password was given
            UsernameExistsError: If the username is taken
        """
        logger.info("creating_user", username=data.username, role=data.role.value)

        if not data.password:
            raise PasswordRequiredError()
        if self.get_by_username(data.username):
            raise UsernameExistsError(data.username)

        insert_data = {
            "name": data.name,
            "username": data.username,
            "role": data.role.value,
            "password": hash_password(data.password),
        }

        try:
            result = self.db.table(self.table).insert(insert_data).execute()
            user = UserResponse(**result.data[0])
        except Exception as e:
            logger.error("create_user_failed", username=data.username, error=str(e))
            raise DatabaseError("insert", str(e))

        logger.info("user_created", user_id=user.id)
        return user

    def update(self, user_id: str, data: UserUpdate) -> UserResponse:
        """
        Update a user. An empty password keeps the current one.

        Raises:
            UserNotFoundError: If user doesn't exist
            UsernameExistsError: If the new username is taken
        """
        logger.info("updating_user", user_id=user_id)

        existing = self.get_by_id(user_id)

        if data.username and data.username != existing.username:
            if self.get_by_username(data.username):
                raise UsernameExistsError(data.username)

        update_data = data.model_dump(mode="json", exclude_unset=True, exclude={"password"})
        if data.password:
            update_data["password"] = hash_password(data.password)

        if not update_data:
            return existing

        try:
            result = (
                self.db.table(self.table)
                .update(update_data)
                .eq("id", user_id)
                .execute()
            )
            user = UserResponse(**result.data[0])
        except Exception as e:
            logger.error("update_user_failed", user_id=user_id, error=str(e))
            raise DatabaseError("update", str(e))

        logger.info(
            "user_updated",
            user_id=user_id,
            fields=[k for k in update_data if k != "password"],
            password_changed="password" in update_data
        )
        return user

    def delete(self, user_id: str, acting_user_id: Optional[str] = None) -> bool:
        """
        Delete a user.

        Raises:
            SelfDeletionError: If a user tries to delete themselves
            UserNotFoundError: If user doesn't exist
        """
        logger.info("deleting_user", user_id=user_id, acting_user_id=acting_user_id)

        if acting_user_id and acting_user_id == user_id:
            raise SelfDeletionError(user_id)

        self.get_by_id(user_id)

        try:
            self.db.table(self.table).delete().eq("id", user_id).execute()
        except Exception as e:
            logger.error("delete_user_failed", user_id=user_id, error=str(e))
            raise DatabaseError("delete", str(e))

        logger.info("user_deleted", user_id=user_id)
        return True


# Singleton instance for convenience
_user_service: Optional[UserService] = None

def get_user_service() -> UserService:
    """Get or create UserService instance."""
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
