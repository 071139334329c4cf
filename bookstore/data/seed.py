# bookstore/data/seed.py
from datetime import date
from decimal import Decimal

from bookstore.data.database import Base, SessionLocal, engine
from bookstore.data.models import (
    AdminModel,
    AuthenticationModel,
    AuthorBookModel,
    AuthorModel,
    BookImageModel,
    BookModel,
    GenreModel,
)
from bookstore.domain.enums import Role
from bookstore.utils.logging import get_logger
from bookstore.utils.security import hash_password

logger = get_logger(__name__)

ADMIN_EMAIL = "admin@bookstore.com"
ADMIN_PASSWORD = "Admin123"

GENRES = ["Fiction", "Science", "History", "Children", "Technology"]

AUTHORS = [
    ("Nguyen Nhat Anh", "nguyen.nhat.anh@bookstore.com"),
    ("Yuval Noah Harari", "harari@bookstore.com"),
    ("Robert C. Martin", "uncle.bob@bookstore.com"),
]

# title, price, stock, genre, author index, publication date
BOOKS = [
    ("Mat Biec", Decimal("95000"), 50, "Fiction", 0, date(1990, 1, 1)),
    ("Sapiens", Decimal("250000"), 30, "History", 1, date(2011, 1, 1)),
    ("Homo Deus", Decimal("270000"), 20, "Science", 1, date(2015, 1, 1)),
    ("Clean Code", Decimal("420000"), 15, "Technology", 2, date(2008, 8, 1)),
]


def seed():
    """Fills an empty database with a small catalog and one admin account."""
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(AuthenticationModel).first():
            logger.info("Database already seeded, skipping")
            return

        db.add(
            AdminModel(
                authentication=AuthenticationModel(
                    email=ADMIN_EMAIL,
                    password_hash=hash_password(ADMIN_PASSWORD),
                    role=Role.ADMIN.value,
                )
            )
        )

        genres = {name: GenreModel(name=name) for name in GENRES}
        db.add_all(genres.values())

        # seeded authors share the admin password
        authors = [
            AuthorModel(
                name=name,
                authentication=AuthenticationModel(
                    email=email,
                    password_hash=hash_password(ADMIN_PASSWORD),
                    role=Role.AUTHOR.value,
                ),
            )
            for name, email in AUTHORS
        ]
        db.add_all(authors)

        for title, price, stock, genre, author_idx, pub_time in BOOKS:
            db.add(
                BookModel(
                    title=title,
                    price=price,
                    stock_quantity=stock,
                    sold_number=0,
                    pub_time=pub_time,
                    genre=genres[genre],
                    images=[BookImageModel(url=f"https://images.bookstore.com/{title.lower().replace(' ', '-')}.jpg")],
                    author_links=[AuthorBookModel(author=authors[author_idx])],
                )
            )

        db.commit()
        logger.info(f"Seeded {len(GENRES)} genres, {len(AUTHORS)} authors, {len(BOOKS)} books and admin {ADMIN_EMAIL}")
    finally:
        db.close()


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    seed()
