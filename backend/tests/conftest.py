"""
MosqueConnect - Test Configuration and Fixtures
"""
import os
from datetime import datetime, timedelta
from typing import AsyncGenerator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_mosqueconnect.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['OFFER_SWEEP_ENABLED'] = 'false'
os.environ['LOG_FILE'] = ''

from mosqueconnect.main import app
from mosqueconnect.core.database import Base, get_db
from mosqueconnect.core.security import get_password_hash, create_access_token
from mosqueconnect.models import (
    User,
    UserRole,
    Mosque,
    MosqueStatus,
    Business,
    BusinessCategory,
    Offer,
    OfferStatus,
    DiscountType,
)

fake = Faker()

TEST_PASSWORD = 'testpassword123'

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test_mosqueconnect.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_user(db: AsyncSession, role: UserRole, **overrides) -> User:
    user = User(
        name=overrides.pop('name', fake.name()[:50]),
        email=overrides.pop('email', fake.unique.email()),
        hashed_password=get_password_hash(TEST_PASSWORD),
        role=role,
        is_active=overrides.pop('is_active', True),
        **overrides
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_mosque(db: AsyncSession, imam: User, status: MosqueStatus = MosqueStatus.PENDING, **overrides) -> Mosque:
    mosque = Mosque(
        name=overrides.pop('name', f"Masjid {fake.last_name()}"),
        street=overrides.pop('street', fake.street_address()),
        city=overrides.pop('city', 'Chicago'),
        state=overrides.pop('state', 'IL'),
        imam_id=imam.id,
        status=status,
        verified=status == MosqueStatus.APPROVED,
        **overrides
    )
    db.add(mosque)
    await db.commit()
    await db.refresh(mosque)
    return mosque


async def make_offer(db: AsyncSession, business: Business, **overrides) -> Offer:
    now = datetime.utcnow()
    offer = Offer(
        business_id=business.id,
        title=overrides.pop('title', 'Weekend Special'),
        discount_type=overrides.pop('discount_type', DiscountType.PERCENTAGE),
        discount_value=overrides.pop('discount_value', 10),
        valid_from=overrides.pop('valid_from', now - timedelta(days=1)),
        valid_to=overrides.pop('valid_to', now + timedelta(days=7)),
        status=overrides.pop('status', OfferStatus.ACTIVE),
        used_count=overrides.pop('used_count', 0),
        **overrides
    )
    db.add(offer)
    await db.commit()
    await db.refresh(offer)
    return offer


def headers_for(user: User) -> dict:
    token_data = {
        'sub': str(user.id),
        'email': user.email,
        'role': user.role.value
    }
    token = create_access_token(token_data)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a plain community member"""
    return await make_user(db_session, UserRole.USER)


@pytest.fixture
async def imam_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, UserRole.IMAM)


@pytest.fixture
async def business_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, UserRole.BUSINESS)


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create an admin test user"""
    return await make_user(db_session, UserRole.ADMIN)


@pytest.fixture
async def business(db_session: AsyncSession, business_user: User) -> Business:
    """Active business owned by business_user"""
    biz = Business(
        name='Crescent Grocery',
        category=BusinessCategory.GROCERY,
        owner_id=business_user.id,
        street='12 Devon Ave',
        city='Chicago',
        state='IL',
    )
    db_session.add(biz)
    await db_session.commit()
    await db_session.refresh(biz)
    return biz


@pytest.fixture
async def pending_mosque(db_session: AsyncSession, imam_user: User) -> Mosque:
    return await make_mosque(db_session, imam_user)


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Generate authentication headers for test user"""
    return headers_for(test_user)


@pytest.fixture
def imam_auth_headers(imam_user: User) -> dict:
    return headers_for(imam_user)


@pytest.fixture
def business_auth_headers(business_user: User) -> dict:
    return headers_for(business_user)


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    """Generate authentication headers for admin user"""
    return headers_for(admin_user)
