# import every model so SQLAlchemy registers it in Base.metadata

from bookstore.data.models.authentication import AuthenticationModel
from bookstore.data.models.user import UserModel
from bookstore.data.models.author import AuthorModel, AuthorBookModel
from bookstore.data.models.admin import AdminModel
from bookstore.data.models.address import AddressModel
from bookstore.data.models.genre import GenreModel
from bookstore.data.models.book import BookModel, BookImageModel
from bookstore.data.models.cart import CartModel
from bookstore.data.models.cart_item import CartItemModel
from bookstore.data.models.order import OrderModel
from bookstore.data.models.order_item import OrderItemModel
from bookstore.data.models.payment import PaymentModel
from bookstore.data.models.review import ReviewModel
from bookstore.data.models.wishlist import WishlistModel

__all__ = [
    "AuthenticationModel",
    "UserModel",
    "AuthorModel",
    "AuthorBookModel",
    "AdminModel",
    "AddressModel",
    "GenreModel",
    "BookModel",
    "BookImageModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "PaymentModel",
    "ReviewModel",
    "WishlistModel",
]
