from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from bookstore.data.database import Base


class AuthenticationModel(Base):
    __tablename__ = "authentications"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)  # user, author, admin
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    # exactly one of these is set, picked by role; the profile goes away with the credential
    user = relationship("UserModel", back_populates="authentication", uselist=False, cascade="all, delete-orphan")
    author = relationship("AuthorModel", back_populates="authentication", uselist=False, cascade="all, delete-orphan")
    admin = relationship("AdminModel", back_populates="authentication", uselist=False, cascade="all, delete-orphan")
