from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, model_validator
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from db.session import get_db
from services.auth import require_api_key
from services.customer_service import customer_service

router = APIRouter(dependencies=[Depends(require_api_key)])
logger = structlog.get_logger()


class CustomerCreate(BaseModel):
    name: str
    email: str


class NonNullUpdate(BaseModel):
    """Partial update: fields may be omitted but not set to null (NOT NULL columns)."""

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            nulls = sorted(k for k, v in data.items() if v is None)
            if nulls:
                raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return data


class CustomerUpdate(NonNullUpdate):
    name: Optional[str] = None
    email: Optional[str] = None


class AddressCreate(BaseModel):
    customer_id: int
    type: str
    street: str
    city: str
    zip: str
    country: str


class AddressUpdate(NonNullUpdate):
    type: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None


class OrderCreate(BaseModel):
    customer_id: int
    order_date: Optional[datetime] = None
    total_amount: Optional[Decimal] = None


class OrderUpdate(BaseModel):
    order_date: Optional[datetime] = None
    total_amount: Optional[Decimal] = None


def _not_found(kind: str, record_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"error": "Not Found", "message": f"{kind} with ID {record_id} not found"}
    )


async def _ensure_customer(db: AsyncSession, customer_id: int) -> None:
    if await customer_service.get_customer(db, customer_id) is None:
        raise _not_found("Customer", customer_id)


# Customers

@router.get("/customers")
async def list_customers(db: AsyncSession = Depends(get_db)) -> List[Dict[str, Any]]:
    return await customer_service.list_customers(db)


@router.get("/customers/{customer_id}")
async def get_customer(customer_id: int, db: AsyncSession = Depends(get_db)):
    customer = await customer_service.get_customer(db, customer_id)
    if customer is None:
        raise _not_found("Customer", customer_id)
    return customer


@router.post("/customers", status_code=201)
async def create_customer(request: CustomerCreate, db: AsyncSession = Depends(get_db)):
    try:
        return await customer_service.create_customer(db, request.model_dump())
    except IntegrityError:
        await db.rollback()
        logger.warning("Customer email already exists", email=request.email)
        raise HTTPException(
            status_code=409,
            detail={"error": "Conflict", "message": "A customer with this email already exists"}
        )


@router.put("/customers/{customer_id}")
async def update_customer(customer_id: int, request: CustomerUpdate, db: AsyncSession = Depends(get_db)):
    try:
        customer = await customer_service.update_customer(db, customer_id, request.model_dump(exclude_unset=True))
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=409,
            detail={"error": "Conflict", "message": "A customer with this email already exists"}
        )
    if customer is None:
        raise _not_found("Customer", customer_id)
    return customer


@router.delete("/customers/{customer_id}")
async def delete_customer(customer_id: int, db: AsyncSession = Depends(get_db)):
    customer = await customer_service.delete_customer(db, customer_id)
    if customer is None:
        raise _not_found("Customer", customer_id)
    return {
        "message": f"Customer with ID {customer_id} successfully deleted",
        "customer": customer
    }


# Addresses

@router.get("/customers/{customer_id}/addresses")
async def list_addresses(customer_id: int, db: AsyncSession = Depends(get_db)):
    return await customer_service.list_addresses(db, customer_id)


@router.post("/addresses", status_code=201)
async def create_address(request: AddressCreate, db: AsyncSession = Depends(get_db)):
    await _ensure_customer(db, request.customer_id)
    return await customer_service.create_address(db, request.model_dump())


@router.get("/addresses/{address_id}")
async def get_address(address_id: int, db: AsyncSession = Depends(get_db)):
    address = await customer_service.get_address(db, address_id)
    if address is None:
        raise _not_found("Address", address_id)
    return address


@router.put("/addresses/{address_id}")
async def update_address(address_id: int, request: AddressUpdate, db: AsyncSession = Depends(get_db)):
    address = await customer_service.update_address(db, address_id, request.model_dump(exclude_unset=True))
    if address is None:
        raise _not_found("Address", address_id)
    return address


@router.delete("/addresses/{address_id}")
async def delete_address(address_id: int, db: AsyncSession = Depends(get_db)):
    address = await customer_service.delete_address(db, address_id)
    if address is None:
        raise _not_found("Address", address_id)
    return {
        "message": f"Address with ID {address_id} successfully deleted",
        "address": address
    }


# Orders

@router.get("/customers/{customer_id}/orders")
async def list_orders(customer_id: int, db: AsyncSession = Depends(get_db)):
    return await customer_service.list_orders(db, customer_id)


@router.post("/orders", status_code=201)
async def create_order(request: OrderCreate, db: AsyncSession = Depends(get_db)):
    await _ensure_customer(db, request.customer_id)
    return await customer_service.create_order(db, request.model_dump())


@router.get("/orders/{order_id}")
async def get_order(order_id: int, db: AsyncSession = Depends(get_db)):
    order = await customer_service.get_order(db, order_id)
    if order is None:
        raise _not_found("Order", order_id)
    return order


@router.put("/orders/{order_id}")
async def update_order(order_id: int, request: OrderUpdate, db: AsyncSession = Depends(get_db)):
    order = await customer_service.update_order(db, order_id, request.model_dump(exclude_unset=True))
    if order is None:
        raise _not_found("Order", order_id)
    return order


@router.delete("/orders/{order_id}")
async def delete_order(order_id: int, db: AsyncSession = Depends(get_db)):
    order = await customer_service.delete_order(db, order_id)
    if order is None:
        raise _not_found("Order", order_id)
    return {
        "message": f"Order with ID {order_id} successfully deleted",
        "order": order
    }
