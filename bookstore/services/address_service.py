# bookstore/services/address_service.py
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from bookstore.data.database import transaction
from bookstore.data.models.address import AddressModel
from bookstore.data.models.user import UserModel
from bookstore.domain.errors import NotFoundError
from bookstore.domain.schemas import AddressCreate, AddressUpdate
from bookstore.services.user_service import address_to_dict
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class AddressService:
    def __init__(self, db: Session):
        self.db = db

    def _get(self, address_id: int) -> AddressModel:
        address = self.db.get(AddressModel, address_id)
        if not address:
            raise NotFoundError("Address not found")
        return address

    #query
    def list_addresses(
        self,
        user_id: Optional[int] = None,
        city: Optional[str] = None,
        ward: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        stmt = select(AddressModel)
        if user_id is not None:
            stmt = stmt.where(AddressModel.user_id == user_id)
        if city:
            stmt = stmt.where(AddressModel.city.contains(city))
        if ward:
            stmt = stmt.where(AddressModel.ward.contains(ward))

        stmt = stmt.order_by(AddressModel.city.asc(), AddressModel.id.asc())
        return [address_to_dict(a) for a in self.db.execute(stmt).scalars().all()]

    def get_address(self, address_id: int) -> Dict[str, Any]:
        return address_to_dict(self._get(address_id))

    def get_owner_id(self, address_id: int) -> int:
        return self._get(address_id).user_id

    def get_user_addresses(self, user_id: int) -> List[Dict[str, Any]]:
        if not self.db.get(UserModel, user_id):
            raise NotFoundError("User not found")
        return self.list_addresses(user_id=user_id)

    #commands
    def create_address(self, payload: AddressCreate) -> Dict[str, Any]:
        if not self.db.get(UserModel, payload.user_id):
            raise NotFoundError("User not found")

        with transaction(self.db):
            address = AddressModel(
                user_id=payload.user_id,
                city=payload.city.strip(),
                ward=payload.ward.strip(),
                specific_address=_clean(payload.specific_address),
            )
            self.db.add(address)
            self.db.flush()

        logger.info(f"Address {address.id} added for user {payload.user_id}")
        return address_to_dict(address)

    def update_address(self, address_id: int, payload: AddressUpdate) -> Dict[str, Any]:
        address = self._get(address_id)
        data = payload.model_dump(exclude_unset=True)

        with transaction(self.db):
            if data.get("city"):
                address.city = data["city"].strip()
            if data.get("ward"):
                address.ward = data["ward"].strip()
            if "specific_address" in data:
                address.specific_address = _clean(data["specific_address"])

        logger.info(f"Address {address_id} updated")
        return address_to_dict(address)

    def delete_address(self, address_id: int):
        address = self._get(address_id)

        with transaction(self.db, deleting=True):
            self.db.delete(address)

        logger.info(f"Address {address_id} deleted")
