"""
Pytest fixtures for repairtrack backend tests.

Provides the test application (in-memory SQLite), a clean database per test,
store fixtures, an in-memory repository for fast lifecycle tests, and a
recording notifier so tests can assert on customer messages.
"""

import logging
import threading

import pytest

from repairtrack import create_app
from repairtrack.extensions import db
from repairtrack.repositories import InMemoryOrderRepository, SqlAlchemyOrderRepository
from repairtrack.services.auth_service import hash_password
from repairtrack.services.context import EXTENSION_KEY
from repairtrack.services.lifecycle_service import OrderLifecycleManager
from repairtrack.services.notification_service import NotificationDispatcher
from repairtrack.services.order_service import OrderIntakeService
from repairtrack.services.pipeline import Pipeline, HUB_STAGES


TEST_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'test',
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'BCRYPT_ROUNDS': 4,
    'HUB_PASSWORD': 'hub-secret',
    'ADMIN_PASSWORD': 'admin-secret',
    'NOTIFIER': 'log',
    'ORDER_PIPELINE': 'hub',
}

STORE_A_PASSWORD = "store-a-pass"
STORE_B_PASSWORD = "store-b-pass"


class RecordingNotifier:
    """Collects (phone_number, message) pairs instead of sending them."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []
        self._lock = threading.Lock()

    def notify(self, phone_number, message):
        if self.fail:
            raise ConnectionError("WhatsApp gateway unreachable")
        with self._lock:
            self.sent.append((phone_number, message))

    def messages_to(self, phone_number):
        return [m for p, m in self.sent if p == phone_number]


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()
        app.extensions[EXTENSION_KEY].dispatcher.shutdown()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def notifications(app):
    """Swap the app's notifier for a recorder for the duration of a test."""
    dispatcher = app.extensions[EXTENSION_KEY].dispatcher
    original = dispatcher.notifier
    recorder = RecordingNotifier()
    dispatcher.notifier = recorder
    yield recorder
    dispatcher.flush(timeout=5)
    dispatcher.notifier = original


@pytest.fixture(scope='function')
def sql_repo(db_session):
    return SqlAlchemyOrderRepository()


@pytest.fixture(scope='function')
def store_a(sql_repo):
    """Create Store A."""
    return sql_repo.create_store("Store A", hash_password(STORE_A_PASSWORD, rounds=4))


@pytest.fixture(scope='function')
def store_b(sql_repo):
    """Create Store B."""
    return sql_repo.create_store("Store B", hash_password(STORE_B_PASSWORD, rounds=4))


# =============================================================================
# IN-MEMORY FIXTURES (no application context needed)
# =============================================================================

@pytest.fixture
def pipeline():
    return Pipeline(HUB_STAGES)


@pytest.fixture
def recorder():
    return RecordingNotifier()


@pytest.fixture
def dispatcher(recorder):
    d = NotificationDispatcher(recorder, logging.getLogger("repairtrack.tests"), max_workers=1)
    yield d
    d.shutdown()


@pytest.fixture
def memory_repo():
    return InMemoryOrderRepository()


@pytest.fixture
def memory_store(memory_repo):
    return memory_repo.create_store("Memory Store", "not-a-real-hash")


@pytest.fixture
def manager(memory_repo, pipeline, dispatcher):
    return OrderLifecycleManager(memory_repo, pipeline, dispatcher)


@pytest.fixture
def intake(memory_repo, pipeline, dispatcher):
    return OrderIntakeService(memory_repo, pipeline, dispatcher)


def order_payload(**overrides) -> dict:
    """Minimal valid intake payload."""
    payload = {
        "customer_name": "John Doe",
        "whatsapp_number": "9876543210",
        "shoe_model": "Nike Air Max",
    }
    payload.update(overrides)
    return payload


def login(client, password: str):
    return client.post('/api/auth/login', json={'password': password})
