"""
User model.

Stores registered accounts along with their lifecycle status and role.
The status decides whether the account may sign in.
"""

import enum

from sqlalchemy import Column, Enum, String
from sqlalchemy.orm import relationship

from userauth.models.base import Base, ModelMixin, TimestampMixin, UUIDMixin


EMAIL_MAX_LENGTH = 64
USER_NAME_MAX_LENGTH = 20


class UserStatus(str, enum.Enum):
    REGISTERED = "REGISTERED"
    ACTIVE = "ACTIVE"
    BANNED = "BANNED"
    INACTIVE = "INACTIVE"


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class User(Base, UUIDMixin, TimestampMixin, ModelMixin):
    """
    Registered account.

    Attributes:
        id: UUID primary key (from UUIDMixin)
        email: Unique email address, stored lowercase
        user_name: Unique handle used as an alternative sign-in credential
        password: Bcrypt hash (never plaintext)
        status: Lifecycle status; only ACTIVE users can authenticate
        role: Authorization role
        created_at / updated_at: from TimestampMixin

    Security considerations:
        - Never log or expose password
        - Serialize through the response schemas, never to_dict()
    """

    __tablename__ = "users"

    email = Column(
        String(EMAIL_MAX_LENGTH),
        nullable=False,
        unique=True,
        doc="Unique email address"
    )

    user_name = Column(
        String(USER_NAME_MAX_LENGTH),
        nullable=False,
        unique=True,
        doc="Unique user name"
    )

    password = Column(
        String,
        nullable=False,
        doc="Bcrypt-hashed password (never store plaintext)"
    )

    status = Column(
        Enum(UserStatus, name="user_status"),
        nullable=False,
        default=UserStatus.REGISTERED,
        doc="Account lifecycle status"
    )

    role = Column(
        Enum(UserRole, name="user_role"),
        nullable=False,
        default=UserRole.USER,
        doc="Authorization role"
    )

    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    @property
    def is_banned(self) -> bool:
        return self.status == UserStatus.BANNED

    @property
    def is_inactive(self) -> bool:
        return self.status == UserStatus.INACTIVE

    @property
    def is_registered(self) -> bool:
        return self.status == UserStatus.REGISTERED

    @property
    def can_authenticate(self) -> bool:
        """Only ACTIVE accounts may sign in or refresh tokens."""
        return self.is_active

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_user(self) -> bool:
        return self.role == UserRole.USER

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, user_name={self.user_name!r}, status={self.status!r})"
