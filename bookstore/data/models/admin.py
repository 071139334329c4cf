from sqlalchemy import Column, Integer, ForeignKey
from sqlalchemy.orm import relationship

from bookstore.data.database import Base


class AdminModel(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True)
    auth_id = Column(Integer, ForeignKey("authentications.id", ondelete="CASCADE"), nullable=False, unique=True)

    authentication = relationship("AuthenticationModel", back_populates="admin")
