import os

# Must be set before buildup.config is imported; load_dotenv never overrides them.
os.environ["DATABASE_URL"] = "sqlite:///./test_buildup.db"
os.environ["KEY_ID"] = "rzp_test_key"
os.environ["KEY_SECRET"] = "test_key_secret"
os.environ["RAZORPAY_WEBHOOK_SECRET"] = "test_webhook_secret"
os.environ["JWT_SECRET"] = "test_jwt_secret"

import pytest
from fastapi.testclient import TestClient

from buildup.database import Base, get_engine, get_sessionmaker, init_db
from buildup.main import app as fastapi_app
from buildup.razorpay_service import ProviderOrder, get_provider

KEY_SECRET = os.environ["KEY_SECRET"]
WEBHOOK_SECRET = os.environ["RAZORPAY_WEBHOOK_SECRET"]


@pytest.fixture(autouse=True)
def setup_db():
    init_db()
    yield
    Base.metadata.drop_all(bind=get_engine())


@pytest.fixture
def session_factory():
    return get_sessionmaker()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def provider(mocker):
    """Stands in for RazorpayProvider; every order gets a distinct id."""
    fake = mocker.Mock()
    fake.key_id = "rzp_test_key"
    fake.create_order.side_effect = lambda amount, currency, receipt: ProviderOrder(
        id="order_" + receipt[-12:],
        amount=amount,
        currency=currency,
        receipt=receipt,
        status="created",
    )
    return fake


@pytest.fixture
def client(provider):
    fastapi_app.dependency_overrides[get_provider] = lambda: provider
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()
