from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from catalog_admin.domain.enums import ProductStatus
from catalog_admin.domain.models import Category, Product
from catalog_admin.domain.repositories import CategoryRepository, ProductRepository
from catalog_admin.domain.schemas import ProductCreate
from catalog_admin.domain.services import CategoryService


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def other_session(session_factory):
    """A second session on the same database, for writes made by another request."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def service(session):
    return CategoryService(session)


@pytest.fixture
def other_service(other_session):
    return CategoryService(other_session)


@pytest.fixture
def category_repository(session):
    return CategoryRepository(session)


@pytest.fixture
def product_repository(session):
    return ProductRepository(session)


@pytest.fixture
def add_product(product_repository):
    """Create a product in the given category."""

    async def _add_product(
        category: str,
        *,
        name: str = "Product",
        status: ProductStatus = ProductStatus.ACTIVE,
        price: str = "10.00",
        stock_quantity: int = 1,
    ) -> Product:
        return await product_repository.create(
            ProductCreate(
                name=name,
                category=category,
                status=status,
                price=Decimal(price),
                stock_quantity=stock_quantity,
            )
        )

    return _add_product


@pytest.fixture
def assert_hierarchy_consistent(session):
    """Check the path and level of every stored category against its parent."""

    async def _assert_hierarchy_consistent() -> None:
        query = select(Category).execution_options(populate_existing=True)
        categories = {category.id: category for category in (await session.exec(query)).all()}

        for category in categories.values():
            assert category.level == len(category.path)

            if category.parent_id is None:
                assert category.path == []
                continue

            parent = categories[category.parent_id]
            assert category.path == [*parent.path, parent.id]
            assert category.level == parent.level + 1

    return _assert_hierarchy_consistent
