"""Authentication service - registration, login, token refresh and logout.

Access tokens are stateless JWTs. Refresh tokens are persisted by hash so they
can be rotated and revoked. Login and logout publish session changes.
"""

import hmac
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.exceptions import Conflict, NotAuthenticated, PersistenceError
from src.app.core.logging import get_logger
from src.app.core.security import (
    DUMMY_PASSWORD_HASH,
    TokenType,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    hash_token,
    verify_password,
)
from src.app.core.session import Session, SessionEvents, session_events
from src.app.models import Profile, RefreshToken, User
from src.app.repositories import ProfileRepository, RefreshTokenRepository, UserRepository
from src.app.schemas.auth import RegisterRequest, TokenPair

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_REFRESH_TOKEN = "Invalid or expired refresh token"


class AuthService:
    """Authentication service backed by the refresh token registry."""

    def __init__(
        self,
        user_repo: UserRepository,
        profile_repo: ProfileRepository,
        token_repo: RefreshTokenRepository,
        session: AsyncSession,
        events: SessionEvents = session_events,
    ):
        self.user_repo = user_repo
        self.profile_repo = profile_repo
        self.token_repo = token_repo
        self.session = session
        self.events = events

    async def register(self, data: RegisterRequest) -> tuple[User, Profile]:
        """Create a user and its profile with the requested role.

        Raises:
            Conflict: the email is already registered
        """
        email = data.email.lower()
        if await self.user_repo.exists_by_email(email):
            raise Conflict("Email already registered")

        user = User(
            email=email,
            hashed_password=hash_password(data.password),
            full_name=data.full_name,
            signup_role=data.role.value,
        )
        profile = Profile(id=user.id, full_name=data.full_name, role=data.role.value)

        try:
            self.user_repo.add(user)
            await self.session.flush()
            self.profile_repo.add(profile)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise Conflict("Email already registered") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(str(e)) from e

        logger.info("User registered", user_id=str(user.id), role=data.role.value)
        return user, profile

    async def login(self, email: str, password: str) -> TokenPair:
        """Check credentials and issue a token pair.

        Raises:
            NotAuthenticated: unknown email, wrong password or inactive user
        """
        user = await self.user_repo.get_by_email(email)

        # Always verify so unknown emails cost the same as wrong passwords
        password_hash = user.hashed_password if user else DUMMY_PASSWORD_HASH
        password_valid = verify_password(password, password_hash)

        if user is None or not password_valid or not user.is_active:
            raise NotAuthenticated(INVALID_CREDENTIALS)

        tokens, auth_session = await self._issue(user.id)
        logger.info("User logged in", user_id=str(user.id))
        await self.events.publish(auth_session)
        return tokens

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Rotate a refresh token: revoke it and issue a fresh pair.

        Raises:
            NotAuthenticated: the token is malformed, expired, revoked or unknown
        """
        payload = decode_token(refresh_token)
        if payload is None or payload.get("type") != TokenType.REFRESH:
            raise NotAuthenticated(INVALID_REFRESH_TOKEN)

        try:
            user_id = UUID(str(payload.get("sub")))
        except ValueError:
            raise NotAuthenticated(INVALID_REFRESH_TOKEN) from None

        token_hash = hash_token(refresh_token)
        # FOR UPDATE: two concurrent refreshes of one token cannot both succeed
        db_token = await self.token_repo.get_valid_by_hash(token_hash, for_update=True)
        if db_token is None or not hmac.compare_digest(token_hash, db_token.token_hash):
            raise NotAuthenticated(INVALID_REFRESH_TOKEN)

        db_token.revoked = True
        tokens, _ = await self._issue(user_id)
        return tokens

    async def logout(self, refresh_token: str) -> bool:
        """Revoke a refresh token. Returns True if a token was revoked."""
        token_hash = hash_token(refresh_token)
        db_token = await self.token_repo.get_by_hash(token_hash)

        revoked = False
        if db_token is not None and hmac.compare_digest(token_hash, db_token.token_hash):
            db_token.revoked = True
            await self._commit()
            revoked = True
            logger.info("User logged out", user_id=str(db_token.user_id))

        await self.events.publish(None)
        return revoked

    async def _issue(self, user_id: UUID) -> tuple[TokenPair, Session]:
        access_token, access_expires = create_access_token(user_id)
        refresh_token, refresh_expires = create_refresh_token(user_id)

        self.token_repo.add(
            RefreshToken(
                user_id=user_id,
                token_hash=hash_token(refresh_token),
                expires_at=refresh_expires,
            )
        )
        await self._commit()

        tokens = TokenPair(access_token=access_token, refresh_token=refresh_token)
        return tokens, Session(user_id=user_id, expires_at=access_expires)

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(str(e)) from e
