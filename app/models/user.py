# models/user.py
from datetime import datetime
import enum
import uuid

from sqlalchemy import Column, String, Boolean, Enum, CHAR, DateTime
from sqlalchemy.orm import relationship
from app.core.database import Base


class UserRoleEnum(str, enum.Enum):
    client = "client"
    designer = "designer"
    media_buyer = "media_buyer"
    admin = "admin"


# roles that bid on projects and own a wallet
FREELANCER_ROLES = (UserRoleEnum.designer, UserRoleEnum.media_buyer)


class User(Base):
    __tablename__ = "users"

    user_id = Column(CHAR(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False, default="")
    role = Column(Enum(UserRoleEnum, values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.now)

    projects_owned = relationship("Project", back_populates="client")
    proposals = relationship("Proposal", back_populates="freelancer")
    wallet = relationship("Wallet", back_populates="user", uselist=False)

    contracts_as_client = relationship(
        "Contract",
        foreign_keys="[Contract.client_id]",
        back_populates="client"
    )
    contracts_as_freelancer = relationship(
        "Contract",
        foreign_keys="[Contract.freelancer_id]",
        back_populates="freelancer"
    )

    @property
    def is_freelancer(self) -> bool:
        return self.role in FREELANCER_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == UserRoleEnum.admin
