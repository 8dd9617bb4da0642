"""Identity service: user records, disable/enable, reset links and tokens."""
import logging
import secrets
import uuid
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from facility_admin.core.config import settings
from facility_admin.core.database import AsyncSessionLocal
from facility_admin.models.identity import Identity, IdentityToken

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Error raised by the identity service, tagged with a provider code."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass
class UserRecord:
    """Public view of an identity."""

    uid: str
    email: str
    display_name: Optional[str]
    email_verified: bool
    disabled: bool

    @classmethod
    def from_identity(cls, identity: Identity) -> "UserRecord":
        return cls(
            uid=identity.uid,
            email=identity.email,
            display_name=identity.display_name,
            email_verified=identity.email_verified,
            disabled=identity.disabled,
        )


def normalize_email(email: str) -> str:
    """
    Validate an email address and return its normalized form.

    Raises:
        AuthError: ``auth/invalid-email`` if the address is malformed
    """
    try:
        return validate_email(email or "", check_deliverability=False).normalized
    except EmailNotValidError:
        raise AuthError("auth/invalid-email", "The email address is improperly formatted.")


class AuthService:
    """Identity records stored in the identities table."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or AsyncSessionLocal

    async def _find(self, db, uid: str) -> Identity:
        result = await db.execute(select(Identity).where(Identity.uid == uid))
        identity = result.scalar_one_or_none()
        if identity is None:
            raise AuthError("auth/user-not-found", f"There is no user record corresponding to the identifier {uid}.")
        return identity

    async def create_user(
        self,
        email: str,
        display_name: Optional[str] = None,
        email_verified: bool = False,
    ) -> UserRecord:
        """
        Create a new identity.

        Args:
            email: Email address
            display_name: Display name
            email_verified: Whether the address is already verified

        Returns:
            The created user record

        Raises:
            AuthError: ``auth/invalid-email`` or ``auth/email-already-exists``
        """
        email = normalize_email(email)

        async with self.session_factory() as db:
            result = await db.execute(select(Identity).where(Identity.email == email))
            if result.scalar_one_or_none() is not None:
                raise AuthError(
                    "auth/email-already-exists",
                    "The email address is already in use by another account.",
                )

            identity = Identity(
                uid=uuid.uuid4().hex[:28],
                email=email,
                display_name=display_name,
                email_verified=email_verified,
                disabled=False,
            )
            db.add(identity)
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                raise AuthError(
                    "auth/email-already-exists",
                    "The email address is already in use by another account.",
                )
            record = UserRecord.from_identity(identity)

        logger.info(f"Created identity {record.uid} for {record.email}")
        return record

    async def get_user(self, uid: str) -> UserRecord:
        async with self.session_factory() as db:
            return UserRecord.from_identity(await self._find(db, uid))

    async def update_user(
        self,
        uid: str,
        disabled: Optional[bool] = None,
        display_name: Optional[str] = None,
        email_verified: Optional[bool] = None,
    ) -> UserRecord:
        """Update fields of an identity; fields left as None are unchanged."""
        async with self.session_factory() as db:
            identity = await self._find(db, uid)
            if disabled is not None:
                identity.disabled = disabled
            if display_name is not None:
                identity.display_name = display_name
            if email_verified is not None:
                identity.email_verified = email_verified
            await db.commit()
            record = UserRecord.from_identity(identity)

        if disabled is not None:
            logger.info(f"Identity {uid} {'disabled' if disabled else 'enabled'}")
        return record

    async def generate_password_reset_link(self, email: str, continue_url: Optional[str] = None) -> str:
        """
        Generate a password reset link for an identity.

        The link is returned to the caller; nothing is sent.

        Args:
            email: Email of the identity
            continue_url: Where to redirect after the reset

        Returns:
            Reset link URL
        """
        email = normalize_email(email)
        code = secrets.token_urlsafe(32)

        async with self.session_factory() as db:
            result = await db.execute(select(Identity).where(Identity.email == email))
            identity = result.scalar_one_or_none()
            if identity is None:
                raise AuthError("auth/user-not-found", f"There is no user record corresponding to the identifier {email}.")
            identity.password_reset_code = code
            await db.commit()

        params = {"mode": "resetPassword", "oobCode": code}
        if continue_url:
            params["continueUrl"] = continue_url
        return f"{settings.PROJECT_URL.rstrip('/')}/auth/action?{urlencode(params)}"

    async def issue_token(self, uid: str) -> str:
        """Issue a bearer token for an identity."""
        token = secrets.token_urlsafe(32)
        async with self.session_factory() as db:
            identity = await self._find(db, uid)
            db.add(IdentityToken(token=token, identity_id=identity.id))
            await db.commit()
        return token

    async def verify_token(self, token: Optional[str]) -> Optional[str]:
        """
        Resolve a bearer token to a uid.

        Returns:
            The uid, or None if the token is unknown or the identity is disabled
        """
        if not token:
            return None
        async with self.session_factory() as db:
            result = await db.execute(
                select(Identity)
                .join(IdentityToken, IdentityToken.identity_id == Identity.id)
                .where(IdentityToken.token == token)
            )
            identity = result.scalar_one_or_none()
            if identity is None or identity.disabled:
                return None
            return identity.uid


# Singleton instance
auth_service = AuthService()
