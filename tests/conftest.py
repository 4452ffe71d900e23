import os
import tempfile
import uuid
from types import SimpleNamespace

import pytest

# Point settings at a throwaway SQLite file before anything imports the engine.
_DB_DIR = tempfile.mkdtemp(prefix="vetchat-tests-")
os.environ["DB_DRIVER_NAME"] = "sqlite+pysqlite"
os.environ["DB_DATABASE_NAME"] = os.path.join(_DB_DIR, "vetchat.db")
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ALGORITHM"] = "HS256"
os.environ["DEFAULT_PAGE_SIZE"] = "20"
os.environ["MAX_PAGE_SIZE"] = "50"

from fastapi.testclient import TestClient  # noqa: E402

from vetchat.api.utils import create_access_token  # noqa: E402
from vetchat.database.config.connection_engine import connection_engine, metadata  # noqa: E402
from vetchat.database.entities import Conversation, ChatMessage, User, Veterinarian  # noqa: E402
from vetchat.database.helpers.transactionManagement import SessionFactory  # noqa: E402
from vetchat.main import create_app  # noqa: E402


@pytest.fixture(autouse=True)
def schema():
    """Fresh tables for every test."""
    metadata.create_all(connection_engine)
    yield
    metadata.drop_all(connection_engine)


def _persist(*entities):
    with SessionFactory() as session:
        session.add_all(entities)
        session.commit()


def make_user(name: str) -> SimpleNamespace:
    user_id = uuid.uuid4()
    _persist(User(user_id=user_id, name=name, email=f"{name.lower()}-{user_id.hex[:8]}@example.com"))
    return SimpleNamespace(id=user_id, name=name)


def make_vet(name: str, available: bool = True) -> SimpleNamespace:
    owner = make_user(name)
    vet_id = uuid.uuid4()
    _persist(Veterinarian(veterinarian_id=vet_id, user_id=owner.id, full_name=f"Dr. {name}", is_available_for_chat=available))
    return SimpleNamespace(id=vet_id, user_id=owner.id, name=f"Dr. {name}")


def load_conversation(conversation_id) -> Conversation:
    """Raw conversation row, bypassing the caller-specific view."""
    with SessionFactory() as session:
        return session.get(Conversation, conversation_id)


def count_messages(conversation_id) -> int:
    with SessionFactory() as session:
        return session.query(ChatMessage).filter(ChatMessage.conversation_id == conversation_id).count()


def count_conversations(**filters) -> int:
    with SessionFactory() as session:
        return session.query(Conversation).filter_by(**filters).count()


@pytest.fixture()
def alice():
    return make_user("Alice")


@pytest.fixture()
def carol():
    return make_user("Carol")


@pytest.fixture()
def vet_bob():
    return make_vet("Bob")


@pytest.fixture()
def vet_dana():
    return make_vet("Dana")


@pytest.fixture()
def app():
    return create_app()


@pytest.fixture()
def client(app):
    return TestClient(app)


def auth_headers(user_id) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user_id)})}"}
