import sqlite3
import logging
from datetime import datetime
from AutoPark.api.DBConnection import DBConnection, DATETIME_FORMAT
from AutoPark.api.Models.User import User, ROLE_ADMIN
from AutoPark.api import crypto_utils

logger = logging.getLogger(__name__)

PII_FIELDS = ("name", "email", "phone")


class AccessUsers:

    def __init__(self, conn: DBConnection):
        self.cursor = conn.cursor
        self.conn = conn.connection


    def _to_user(self, row):
        result = dict(row)
        for field in PII_FIELDS:
            result[field] = crypto_utils.reveal(result.get(field))
        result["created_at"] = datetime.strptime(result["created_at"], DATETIME_FORMAT)
        result["active"] = bool(result["active"])
        return User(**result)


    def _payload(self, user: User):
        # payload voorbereiden met encrypted PII
        payload = {
            "id": user.id,
            "username": user.username,
            "password": user.password,
            "created_at": user.created_at.strftime(DATETIME_FORMAT),
            "role": user.role,
            "active": user.active,
        }
        for field in PII_FIELDS:
            payload[field] = crypto_utils.protect(getattr(user, field))
        return payload


    def get_user_byusername(self, username):
        query = """
        SELECT * FROM users
        WHERE username = ?;
        """
        self.cursor.execute(query, [username])
        result = self.cursor.fetchone()
        if result is None:
            return None
        return self._to_user(result)


    def get_user_byid(self, id):
        query = """
        SELECT * FROM users
        WHERE id = ?;
        """
        self.cursor.execute(query, [id])
        result = self.cursor.fetchone()
        if result is None:
            return None
        return self._to_user(result)


    def has_admin(self) -> bool:
        query = """
        SELECT 1 FROM users
        WHERE role = ?
        LIMIT 1;
        """
        self.cursor.execute(query, [ROLE_ADMIN])
        return self.cursor.fetchone() is not None


    def add_user(self, user: User) -> bool:
        query = """
        INSERT INTO users
            (username, name, email, password, created_at, phone, role, active)
        VALUES
            (:username, :name, :email, :password, :created_at, :phone, :role, :active)
        RETURNING id;
        """
        try:
            self.cursor.execute(query, self._payload(user))
            user.id = self.cursor.fetchone()[0]
            self.conn.commit()
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            logger.warning("Could not add user %s: %s", user.username, e)
            return False
        return True


    def update_user(self, user: User):
        query = """
        UPDATE users
        SET username = :username,
            name = :name,
            email = :email,
            password = :password,
            phone = :phone,
            role = :role,
            active = :active
        WHERE id = :id;
        """
        self.cursor.execute(query, self._payload(user))
        self.conn.commit()
