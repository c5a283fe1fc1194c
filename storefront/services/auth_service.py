import logging
from typing import Optional

from pydantic import ValidationError

from storefront.core.exceptions import ApiError, StorefrontException
from storefront.schemas.session import AuthPayload, LoginResult, User, UserLogin, UserSignup
from storefront.services.api_client import ApiClient
from storefront.services.session_service import SessionStore

logger = logging.getLogger(__name__)


class AuthClient:
    """Login, registration and logout; owns the session lifecycle"""

    def __init__(self, api: ApiClient, session: SessionStore):
        self.api = api
        self.session = session

    async def _authenticate(self, path: str, body: dict, fallback: str) -> AuthPayload:
        response = await self.api.request("POST", path, json_body=body)
        envelope = self.api.parse_envelope(response)

        if not (envelope.success and envelope.data):
            raise ApiError(envelope.message or fallback, response.status_code)

        try:
            payload = AuthPayload.model_validate(envelope.data)
        except ValidationError as e:
            raise ApiError(f"{fallback}: malformed response", response.status_code) from e

        self.session.set_session(self.session.new_session(payload))
        return payload

    async def register(self, email: str, password: str, name: str) -> User:
        try:
            body = UserSignup(name=name, email=email, password=password).model_dump()
            payload = await self._authenticate("/register", body, "Registration failed")
        except ValidationError as e:
            logger.error(f"Registration error: {e}")
            raise ApiError("Registration failed: invalid input") from e
        except StorefrontException as e:
            logger.error(f"Registration error: {e.message}")
            raise

        logger.info(f"Registered user {payload.user.id}")
        return payload.user

    async def login(self, email: str, password: str) -> LoginResult:
        try:
            body = UserLogin(email=email, password=password).model_dump()
            payload = await self._authenticate("/login", body, "Login failed")
        except ValidationError as e:
            logger.error(f"Login error: {e}")
            raise ApiError("Login failed: invalid input") from e
        except StorefrontException as e:
            logger.error(f"Login error: {e.message}")
            raise

        # Admins land on the dashboard
        redirect_to = "/admin" if payload.user.role == "admin" else "/"
        logger.info(f"User {payload.user.id} logged in")
        return LoginResult(user=payload.user, redirect_to=redirect_to)

    async def logout(self) -> None:
        token = self.session.get_auth_token()
        try:
            if token:
                await self.api.request("POST", "/logout", token=token)
        except ApiError as e:
            logger.error(f"Logout error: {e.message}")
        finally:
            # Always clear session
            self.session.clear_session()

    def get_current_user(self) -> Optional[User]:
        return self.session.get_current_user()

    def is_authenticated(self) -> bool:
        return self.session.is_authenticated()

    def is_admin(self) -> bool:
        return self.session.is_admin()
