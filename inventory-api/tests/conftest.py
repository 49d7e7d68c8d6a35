"""
Pytest fixtures for the inventory API test suite.

Every test gets its own file-backed SQLite database (through aiosqlite) in
``tmp_path``, so separate sessions see each other's commits the way two
requests would against a real server.
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import httpx
import pytest

from inventory_api.core.config import Settings
from inventory_api.core.logging_config import LogContext, StructuredFormatter, configure_logging, reset_logging
from inventory_api.core.security import create_access_token, hash_password
from inventory_api.db.base import Database
from inventory_api.db.models.users import Role
from inventory_api.db.repositories.products import create_product, get_product_by_id
from inventory_api.db.repositories.purchases import count_purchase_lines, count_purchases
from inventory_api.db.repositories.users import create_user
from inventory_api.main import create_app

TEST_PASSWORD = "123456"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture inventory_api logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            assert any(r["message"] == "purchase_completed" for r in captured_logs())
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("inventory_api")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DB_URL=f"sqlite+aiosqlite:///{tmp_path / 'inventory.db'}",
        JWT_SECRET="test-secret-key-for-the-inventory-api",
        BCRYPT_ROUNDS=4,
        ENVIRONMENT="test",
        CREATE_TABLES=False,
    )


@pytest.fixture
async def database(settings):
    database = Database(settings.DB_URL)
    await database.create_all()
    yield database
    await database.dispose()


@pytest.fixture
async def session(database):
    async with database.session_factory() as session:
        yield session


# =============================================================================
# Data factories
# =============================================================================


@pytest.fixture
def make_user(database):
    async def _make_user(
        name: str = "Maria Garcia",
        email: str = "maria@customer.com",
        role: Role = Role.CUSTOMER,
        password: str = TEST_PASSWORD,
    ):
        async with database.session_scope() as db:
            return await create_user(
                db,
                name=name,
                email=email,
                password_hash=hash_password(password, rounds=4),
                role=role,
            )

    return _make_user


@pytest.fixture
def make_product(database):
    async def _make_product(
        lot_number: str = "LOT-2025-002",
        name: str = "Logitech MX Master 3 Mouse",
        unit_price: str = "99.99",
        available_quantity: int = 50,
        received_on: date = date(2025, 11, 5),
    ):
        async with database.session_scope() as db:
            return await create_product(
                db,
                lot_number=lot_number,
                name=name,
                unit_price=Decimal(unit_price),
                available_quantity=available_quantity,
                received_on=received_on,
            )

    return _make_product


@pytest.fixture
async def customer(make_user):
    return await make_user()


@pytest.fixture
async def other_customer(make_user):
    return await make_user(name="Carlos Lopez", email="carlos@customer.com")


@pytest.fixture
async def admin(make_user):
    return await make_user(name="Main Administrator", email="admin@inventory.com", role=Role.ADMIN)


@pytest.fixture
def stock_of(database):
    """Read a product's committed stock through a fresh session."""
    async def _stock_of(product_id: int) -> int:
        async with database.session_factory() as db:
            product = await get_product_by_id(db, product_id)
            return product.available_quantity

    return _stock_of


@pytest.fixture
def ledger_size(database):
    """Return (purchase rows, purchase line rows) as committed."""
    async def _ledger_size() -> tuple[int, int]:
        async with database.session_factory() as db:
            return await count_purchases(db), await count_purchase_lines(db)

    return _ledger_size


# =============================================================================
# HTTP fixtures
# =============================================================================


@pytest.fixture
def auth_headers(settings):
    def _auth_headers(user) -> dict[str, str]:
        token = create_access_token(user.id, user.role.value, settings)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def app(settings, database):
    return create_app(settings, database=database)


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
