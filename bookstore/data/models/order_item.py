from sqlalchemy import Column, Integer, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from bookstore.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # no ON DELETE: a book that was ever ordered stays in the catalog
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False)

    price_at_time = Column(Numeric(12, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    sub_total = Column(Numeric(14, 2), nullable=False)

    order = relationship("OrderModel", back_populates="items")
    book = relationship("BookModel")
