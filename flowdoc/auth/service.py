"""
Account registration, login and the current-session pointer.

Accounts live under one storage key, the session snapshot under another.
The session survives restarts: a new AuthService over the same storage picks
up whoever was logged in.
"""

from typing import Any, Dict, List, Optional

from flowdoc.auth.account import PROFILE_FIELDS, Account
from flowdoc.auth.passwords import hash_password, verify_password
from flowdoc.core.errors import (
    DuplicateEmailError, InvalidCredentialsError, NotAuthenticatedError, ValidationError,
)
from flowdoc.log import get_logger
from flowdoc.storage.backends import KeyValueStorage
from flowdoc.storage.repository import SESSION_KEY, USERS_KEY, JsonRepository

logger = get_logger(__name__)

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demo1234"


class AuthService:
    def __init__(self, storage: KeyValueStorage):
        self._accounts = JsonRepository(storage, USERS_KEY)
        self._session = JsonRepository(storage, SESSION_KEY)
        snapshot = self._session.read(default=None)
        self.current_user: Optional[Dict[str, Any]] = snapshot if isinstance(snapshot, dict) else None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    def accounts(self) -> List[Account]:
        data = self._accounts.read(default=[])
        if not isinstance(data, list):
            logger.error("Expected a list of accounts under %s", USERS_KEY)
            return []
        accounts = []
        for raw in data:
            try:
                accounts.append(Account.from_dict(raw))
            except (KeyError, TypeError, AttributeError) as e:
                logger.error("Skipping malformed account record: %s", e)
        return accounts

    def find_by_email(self, email: str) -> Optional[Account]:
        return next((a for a in self.accounts() if a.email == email), None)

    def _store(self, accounts: List[Account]) -> bool:
        return self._accounts.write([a.to_dict() for a in accounts])

    def _start_session(self, account: Account) -> Dict[str, Any]:
        self.current_user = account.public_dict()
        self._session.write(self.current_user)
        return dict(self.current_user)

    def register(
        self,
        name: str,
        email: str,
        password: str,
        avatar: Optional[str] = None,
        role: str = "user",
        department: str = "",
        position: str = "",
    ) -> Dict[str, Any]:
        """Create an account and log it in. Returns the session snapshot."""
        if not email:
            raise ValidationError("email is required", field="email")
        if not password:
            raise ValidationError("password is required", field="password")
        accounts = self.accounts()
        if any(a.email == email for a in accounts):
            logger.warning("Registration rejected, email already registered: %s", email)
            raise DuplicateEmailError(email)

        account = Account(
            name=name,
            email=email,
            password_hash=hash_password(password),
            avatar=avatar,
            role=role or "user",
            department=department or "",
            position=position or "",
        )
        accounts.append(account)
        self._store(accounts)
        logger.info("Registered account %s", account.id)
        return self._start_session(account)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        account = self.find_by_email(email)
        if not verify_password(password, account.password_hash if account else None):
            logger.warning("Failed login for %s", email)
            raise InvalidCredentialsError()
        logger.info("Logged in %s", account.id)
        return self._start_session(account)

    def logout(self) -> None:
        """Clear the session; stored accounts are untouched."""
        self.current_user = None
        self._session.clear()

    def update_profile(self, **updates: Any) -> Dict[str, Any]:
        """
        Merge profile fields into the logged-in account and the session copy.

        Accepts the profile fields plus ``password``, which is re-hashed.
        """
        if self.current_user is None:
            raise NotAuthenticatedError()
        unknown = set(updates) - set(PROFILE_FIELDS) - {"password"}
        if unknown:
            raise ValidationError(f"Unknown profile field(s): {', '.join(sorted(unknown))}")

        accounts = self.accounts()
        user_id = self.current_user["id"]
        new_email = updates.get("email")
        if new_email is not None:
            if not new_email:
                raise ValidationError("email is required", field="email")
            if any(a.email == new_email and a.id != user_id for a in accounts):
                raise DuplicateEmailError(new_email)

        for account in accounts:
            if account.id != user_id:
                continue
            for field in PROFILE_FIELDS:
                if field in updates:
                    setattr(account, field, updates[field])
            if updates.get("password"):
                account.password_hash = hash_password(updates["password"])
        self._store(accounts)

        self.current_user = {**self.current_user, **{k: v for k, v in updates.items() if k in PROFILE_FIELDS}}
        self._session.write(self.current_user)
        return dict(self.current_user)

    def ensure_demo_account(self) -> bool:
        """Seed the demo account if it does not exist yet. Returns True if one was created."""
        accounts = self.accounts()
        if any(a.email == DEMO_EMAIL for a in accounts):
            return False
        accounts.append(Account(
            name="Demo User",
            email=DEMO_EMAIL,
            password_hash=hash_password(DEMO_PASSWORD),
            account_id="demo-user-001",
            created_at="2024-01-01T00:00:00+00:00",
            department="Systems Development",
            position="Engineer",
        ))
        self._store(accounts)
        logger.info("Initialized demo account")
        return True
