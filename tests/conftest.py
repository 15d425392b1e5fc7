import asyncio
from datetime import datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from db.models import Base, Customer, Address, Order
from sql_tools.sql_executor import SQLExecutor

DEFAULT_ANALYSIS = "[CONFIDENCE: 0.90] The user wants a list of customers from the customer table."
DEFAULT_SQL = "SELECT id, name FROM customer ORDER BY id"
DEFAULT_ANSWER = "There are 2 customers: Alice Smith and Bob Jones."


class FakeGateway:
    """
    Stands in for the language model gateway.

    Each response may be a string, a callable taking the question, or an
    exception instance to raise. `delay` makes every call wait first.
    """

    def __init__(self, analysis=DEFAULT_ANALYSIS, sql=DEFAULT_SQL, answer=DEFAULT_ANSWER, delay=0.0):
        self.analysis = analysis
        self.sql = sql
        self.answer = answer
        self.delay = delay
        self.calls = []

    async def analyze(self, schema, question):
        return await self._respond("analyze", self.analysis, question)

    async def generate_sql(self, schema, question, analysis):
        return await self._respond("generate_sql", self.sql, question)

    async def generate_answer(self, question, sql_query, query_result):
        self.last_query_result = query_result
        return await self._respond("generate_answer", self.answer, question)

    async def _respond(self, operation, value, question):
        self.calls.append(operation)
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(value, Exception):
            raise value
        if callable(value):
            return value(question)
        return value


# In-memory store shared by every connection of one test
@pytest_asyncio.fixture(scope="function")
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        alice = Customer(name="Alice Smith", email="alice@example.com")
        bob = Customer(name="Bob Jones", email="bob@example.com")
        session.add_all([alice, bob])
        await session.flush()
        session.add_all([
            Address(customer_id=alice.id, type="billing", street="1 Main St",
                    city="Springfield", zip="12345", country="USA"),
            Address(customer_id=bob.id, type="shipping", street="9 Elm Rd",
                    city="Shelbyville", zip="54321", country="USA"),
            Order(customer_id=alice.id, order_date=datetime(2024, 1, 15, 10, 30),
                  total_amount=Decimal("150.50")),
            Order(customer_id=alice.id, order_date=datetime(2024, 2, 1, 9, 0),
                  total_amount=Decimal("20.00")),
        ])
        await session.commit()

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def executor(engine):
    return SQLExecutor(engine)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def make_gateway():
    return FakeGateway
