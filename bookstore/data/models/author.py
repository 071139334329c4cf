from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from bookstore.data.database import Base


class AuthorModel(Base):
    __tablename__ = "authors"

    id = Column(Integer, primary_key=True)
    auth_id = Column(Integer, ForeignKey("authentications.id", ondelete="CASCADE"), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    authentication = relationship("AuthenticationModel", back_populates="author")
    book_links = relationship("AuthorBookModel", back_populates="author", passive_deletes="all")


class AuthorBookModel(Base):
    __tablename__ = "author_books"

    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), primary_key=True)
    # RESTRICT: an author still credited on a book cannot be deleted
    author_id = Column(Integer, ForeignKey("authors.id", ondelete="RESTRICT"), primary_key=True)

    book = relationship("BookModel", back_populates="author_links")
    author = relationship("AuthorModel", back_populates="book_links")
