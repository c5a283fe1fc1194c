import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union

from pydantic import ValidationError

from storefront.core.config import settings
from storefront.core.exceptions import StorageException
from storefront.schemas.session import AuthPayload, SessionData, User

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """
    Persisted "who is logged in" record: {user, token, expires}.

    One writer (the current login/register/logout action), many readers.
    Every read goes back to storage so all services see the same session.
    Expiry is checked lazily on read; an expired entry is deleted.
    """

    def __init__(
        self,
        storage,
        key: Optional[str] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.storage = storage
        self.key = key or settings.SESSION_STORAGE_KEY
        self.clock = clock

    def hydrate(self) -> Optional[SessionData]:
        """Start-up hook: load the stored session, dropping it if expired"""
        session = self.get_session()
        if session:
            logger.info(f"Session restored for user {session.user.id}")
        return session

    def teardown(self) -> None:
        self.clear_session()

    def new_session(self, payload: AuthPayload, ttl_days: Optional[int] = None) -> SessionData:
        days = settings.SESSION_TTL_DAYS if ttl_days is None else ttl_days
        return SessionData(
            user=payload.user,
            token=payload.token,
            expires=self.clock() + timedelta(days=days),
        )

    def set_session(self, data: Union[SessionData, dict]) -> SessionData:
        session = data if isinstance(data, SessionData) else SessionData.model_validate(data)
        self.storage.set_item(self.key, session.model_dump_json())
        return session

    def get_session(self) -> Optional[SessionData]:
        try:
            raw = self.storage.get_item(self.key)
        except StorageException as e:
            logger.error(f"Error reading session: {e}")
            return None
        if not raw:
            return None

        try:
            session = SessionData.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Error parsing stored session: {e}")
            return None

        expires = session.expires
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        if expires < self.clock():
            logger.info("Stored session expired, removing it")
            try:
                self.clear_session()
            except StorageException as e:
                logger.error(f"Error removing expired session: {e}")
            return None

        return session

    def clear_session(self) -> None:
        self.storage.remove_item(self.key)

    def get_current_user(self) -> Optional[User]:
        session = self.get_session()
        return session.user if session else None

    def get_auth_token(self) -> Optional[str]:
        session = self.get_session()
        return session.token if session and session.token else None

    def is_authenticated(self) -> bool:
        return self.get_current_user() is not None

    def is_admin(self) -> bool:
        user = self.get_current_user()
        return bool(user and user.role == "admin")
