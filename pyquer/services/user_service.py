import logging
from typing import List, Optional

import psycopg2

from pyquer.clients.postgres_client import get_db_connection
from pyquer.errors import AuthenticationError, DuplicateUserError, PyquerError
from pyquer.models.user import User
from pyquer.services.auth_service import hash_password, verify_password

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, name, email, password_hash, role, is_active, last_login, created_at"


class UserStore:
    def __init__(self, database_url: Optional[str]):
        self.database_url = database_url

    def _connect(self):
        conn = get_db_connection(self.database_url)
        if not conn:
            raise PyquerError("User database unavailable")
        return conn

    def register(self, name: str, email: str, password: str) -> User:
        email = email.strip().lower()
        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute(
                f"""
                INSERT INTO users (name, email, password_hash, last_login)
                VALUES (%s, %s, %s, NOW())
                RETURNING {USER_COLUMNS}
                """,
                (name.strip(), email, hash_password(password))
            )
            row = cur.fetchone()
            conn.commit()
            logger.info("Registered user %s", row["id"])
            return User(**dict(row))
        except psycopg2.IntegrityError:
            conn.rollback()
            raise DuplicateUserError(email)
        finally:
            conn.close()

    def authenticate(self, email: str, password: str) -> User:
        user = self.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")
        self.update_last_login(user.id)
        return user

    def get_by_email(self, email: str) -> Optional[User]:
        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE email = %s", (email.strip().lower(),))
            row = cur.fetchone()
            return User(**dict(row)) if row else None
        finally:
            conn.close()

    def get_by_id(self, user_id: int) -> Optional[User]:
        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
            row = cur.fetchone()
            return User(**dict(row)) if row else None
        finally:
            conn.close()

    def update_last_login(self, user_id: int):
        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute("UPDATE users SET last_login = NOW() WHERE id = %s", (user_id,))
            conn.commit()
        finally:
            conn.close()

    def update_profile(
        self,
        user_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Optional[User]:
        """Update whichever fields are given; None when the user does not exist"""
        assignments = []
        params = []
        if name:
            assignments.append("name = %s")
            params.append(name.strip())
        if email:
            email = email.strip().lower()
            assignments.append("email = %s")
            params.append(email)
        if password:
            assignments.append("password_hash = %s")
            params.append(hash_password(password))
        if not assignments:
            return self.get_by_id(user_id)

        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute(
                f"UPDATE users SET {', '.join(assignments)} WHERE id = %s RETURNING {USER_COLUMNS}",
                (*params, user_id)
            )
            row = cur.fetchone()
            conn.commit()
            if row:
                logger.info("Updated profile for user %s", user_id)
            return User(**dict(row)) if row else None
        except psycopg2.IntegrityError:
            conn.rollback()
            raise DuplicateUserError(email)
        finally:
            conn.close()

    def list_users(self) -> List[User]:
        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute(f"SELECT {USER_COLUMNS} FROM users ORDER BY created_at DESC")
            return [User(**dict(row)) for row in cur.fetchall()]
        finally:
            conn.close()

    def delete_user(self, user_id: int) -> bool:
        """Delete a user and their history; False if no such user"""
        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute("DELETE FROM users WHERE id = %s", (user_id,))
            deleted = cur.rowcount > 0
            conn.commit()
            if deleted:
                logger.info("Deleted user %s", user_id)
            return deleted
        finally:
            conn.close()
