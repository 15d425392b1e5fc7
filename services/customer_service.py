from typing import Dict, Any, List, Optional
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from db.models import Customer, Address, Order

logger = structlog.get_logger()


def customer_to_dict(customer: Customer, include_related: bool = False) -> Dict[str, Any]:
    data = {
        "id": customer.id,
        "name": customer.name,
        "email": customer.email
    }
    if include_related:
        data["address"] = [address_to_dict(a) for a in customer.address]
        data["orders"] = [order_to_dict(o) for o in customer.orders]
    return data


def address_to_dict(address: Address) -> Dict[str, Any]:
    return {
        "id": address.id,
        "customer_id": address.customer_id,
        "type": address.type,
        "street": address.street,
        "city": address.city,
        "zip": address.zip,
        "country": address.country
    }


def order_to_dict(order: Order) -> Dict[str, Any]:
    return {
        "id": order.id,
        "customer_id": order.customer_id,
        "order_date": order.order_date,
        "total_amount": order.total_amount
    }


class CustomerService:
    """
    Data access for the customer, address and orders tables.

    Methods return plain dicts, or None when the record does not exist.
    Updates only touch the fields present in `data`.
    """

    # Customers

    async def list_customers(self, session: AsyncSession) -> List[Dict[str, Any]]:
        result = await session.execute(select(Customer).order_by(Customer.id))
        return [customer_to_dict(c) for c in result.scalars().all()]

    async def get_customer(self, session: AsyncSession, customer_id: int) -> Optional[Dict[str, Any]]:
        stmt = (
            select(Customer)
            .where(Customer.id == customer_id)
            .options(selectinload(Customer.address), selectinload(Customer.orders))
        )
        result = await session.execute(stmt)
        customer = result.scalar_one_or_none()
        return customer_to_dict(customer, include_related=True) if customer else None

    async def create_customer(self, session: AsyncSession, data: Dict[str, Any]) -> Dict[str, Any]:
        customer = Customer(**data)
        session.add(customer)
        await session.commit()
        await session.refresh(customer)
        logger.info("Customer created", customer_id=customer.id)
        return customer_to_dict(customer)

    async def update_customer(
        self,
        session: AsyncSession,
        customer_id: int,
        data: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        customer = await session.get(Customer, customer_id)
        if not customer:
            return None
        for key, value in data.items():
            setattr(customer, key, value)
        await session.commit()
        await session.refresh(customer)
        return customer_to_dict(customer)

    async def delete_customer(self, session: AsyncSession, customer_id: int) -> Optional[Dict[str, Any]]:
        stmt = (
            select(Customer)
            .where(Customer.id == customer_id)
            .options(selectinload(Customer.address), selectinload(Customer.orders))
        )
        customer = (await session.execute(stmt)).scalar_one_or_none()
        if not customer:
            return None
        deleted = customer_to_dict(customer)
        await session.delete(customer)
        await session.commit()
        logger.info("Customer deleted", customer_id=customer_id)
        return deleted

    # Addresses

    async def list_addresses(self, session: AsyncSession, customer_id: int) -> List[Dict[str, Any]]:
        stmt = select(Address).where(Address.customer_id == customer_id).order_by(Address.id)
        result = await session.execute(stmt)
        return [address_to_dict(a) for a in result.scalars().all()]

    async def get_address(self, session: AsyncSession, address_id: int) -> Optional[Dict[str, Any]]:
        address = await session.get(Address, address_id)
        return address_to_dict(address) if address else None

    async def create_address(self, session: AsyncSession, data: Dict[str, Any]) -> Dict[str, Any]:
        address = Address(**data)
        session.add(address)
        await session.commit()
        await session.refresh(address)
        return address_to_dict(address)

    async def update_address(
        self,
        session: AsyncSession,
        address_id: int,
        data: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        address = await session.get(Address, address_id)
        if not address:
            return None
        for key, value in data.items():
            setattr(address, key, value)
        await session.commit()
        await session.refresh(address)
        return address_to_dict(address)

    async def delete_address(self, session: AsyncSession, address_id: int) -> Optional[Dict[str, Any]]:
        address = await session.get(Address, address_id)
        if not address:
            return None
        deleted = address_to_dict(address)
        await session.delete(address)
        await session.commit()
        return deleted

    # Orders

    async def list_orders(self, session: AsyncSession, customer_id: int) -> List[Dict[str, Any]]:
        stmt = select(Order).where(Order.customer_id == customer_id).order_by(Order.id)
        result = await session.execute(stmt)
        return [order_to_dict(o) for o in result.scalars().all()]

    async def get_order(self, session: AsyncSession, order_id: int) -> Optional[Dict[str, Any]]:
        order = await session.get(Order, order_id)
        return order_to_dict(order) if order else None

    async def create_order(self, session: AsyncSession, data: Dict[str, Any]) -> Dict[str, Any]:
        # A missing order_date falls back to the column default
        order = Order(**{k: v for k, v in data.items() if v is not None or k != "order_date"})
        session.add(order)
        await session.commit()
        await session.refresh(order)
        return order_to_dict(order)

    async def update_order(
        self,
        session: AsyncSession,
        order_id: int,
        data: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        order = await session.get(Order, order_id)
        if not order:
            return None
        for key, value in data.items():
            setattr(order, key, value)
        await session.commit()
        await session.refresh(order)
        return order_to_dict(order)

    async def delete_order(self, session: AsyncSession, order_id: int) -> Optional[Dict[str, Any]]:
        order = await session.get(Order, order_id)
        if not order:
            return None
        deleted = order_to_dict(order)
        await session.delete(order)
        await session.commit()
        return deleted


customer_service = CustomerService()
