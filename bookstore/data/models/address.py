from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from bookstore.data.database import Base


class AddressModel(Base):
    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    city = Column(String(255), nullable=False)
    ward = Column(String(255), nullable=False)
    specific_address = Column(String(255), nullable=True)

    user = relationship("UserModel", back_populates="addresses")
