from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from bookstore.data.database import Base


class GenreModel(Base):
    __tablename__ = "genres"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, unique=True)

    books = relationship("BookModel", back_populates="genre", passive_deletes="all")
