from datetime import datetime

ROLE_ADMIN = "ADMIN"
ROLE_DRIVER = "DRIVER"


class User:

    def __init__(self,
                 id: int,
                 username: str,
                 name: str,
                 email: str,
                 password: str,
                 created_at: datetime,
                 phone: str,
                 role: str,
                 active: bool):

        self.id = id
        self.username = username
        self.name = name
        self.email = email
        self.password = password
        self.created_at = created_at
        self.phone = phone
        self.role = role
        self.active = active


    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "active": self.active,
            "created_at": self.created_at.strftime("%Y-%m-%d %H:%M:%S"),
        }


    def __repr__(self):
        return self.username
