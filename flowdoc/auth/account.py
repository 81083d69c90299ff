"""Account records and their JSON form."""

from typing import Any, Dict, Optional

from flowdoc.core.records import new_id, utc_now

PROFILE_FIELDS = ("name", "email", "avatar", "role", "department", "position")


class Account:
    """A registered user. Only a one-way hash of the password is kept."""
    def __init__(
        self,
        name: str,
        email: str,
        password_hash: str = "",
        account_id: Optional[str] = None,
        created_at: Optional[str] = None,
        avatar: Optional[str] = None,
        role: str = "user",
        department: str = "",
        position: str = "",
    ):
        self.id = account_id or new_id("user")
        self.name = name
        self.email = email
        self.password_hash = password_hash
        self.created_at = created_at or utc_now()
        self.avatar = avatar
        self.role = role
        self.department = department
        self.position = position

    def public_dict(self) -> Dict[str, Any]:
        """Snapshot without the password hash, as kept in the session."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "createdAt": self.created_at,
            "avatar": self.avatar,
            "role": self.role,
            "department": self.department,
            "position": self.position,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.public_dict()
        data["passwordHash"] = self.password_hash
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        return cls(
            name=data.get("name", ""),
            email=data["email"],
            password_hash=data.get("passwordHash", ""),
            account_id=data.get("id"),
            created_at=data.get("createdAt"),
            avatar=data.get("avatar"),
            role=data.get("role", "user"),
            department=data.get("department", ""),
            position=data.get("position", ""),
        )

    def __repr__(self):
        return f"<Account id={self.id} email='{self.email}'>"
