from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from bookstore.data.database import Base


class BookModel(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False, index=True)
    price = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=True)

    stock_quantity = Column(Integer, nullable=False, default=0)
    sold_number = Column(Integer, nullable=False, default=0)
    pub_time = Column(Date, nullable=True)

    genre_id = Column(Integer, ForeignKey("genres.id", ondelete="RESTRICT"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    genre = relationship("GenreModel", back_populates="books")
    images = relationship(
        "BookImageModel",
        back_populates="book",
        cascade="all, delete-orphan",
        order_by="BookImageModel.id",
    )
    author_links = relationship("AuthorBookModel", back_populates="book", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_book_stock_non_negative"),
        CheckConstraint("sold_number >= 0", name="ck_book_sold_non_negative"),
    )

    @property
    def authors(self):
        return [link.author for link in self.author_links]

    @property
    def cover_url(self):
        return self.images[0].url if self.images else None


class BookImageModel(Base):
    __tablename__ = "book_images"

    id = Column(Integer, primary_key=True)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(String(500), nullable=False)

    book = relationship("BookModel", back_populates="images")
