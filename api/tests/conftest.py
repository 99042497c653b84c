import os
from typing import Dict

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session, create_engine

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("OPERATOR_ACCESS_TOKEN", "operator-test-token")

from esign.main import app  # noqa: E402
from esign import db as db_module  # noqa: E402
from esign.db import get_session  # noqa: E402
from esign import storage as storage_module  # noqa: E402
from esign import uploads as uploads_module  # noqa: E402
from esign import dispatch as dispatch_module  # noqa: E402
from esign.routers import wizard as wizard_router  # noqa: E402
from esign.sessions import SessionStore, get_store  # noqa: E402
from esign.engine.session import WizardSession  # noqa: E402
from esign.engine.state import SignerCandidate, SignerRole, UploadedFile  # noqa: E402


@pytest.fixture(scope="session")
def test_engine(tmp_path_factory):
    db_path = tmp_path_factory.mktemp("data") / "test.db"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    return engine


@pytest.fixture
def setup_db(test_engine):
    SQLModel.metadata.drop_all(test_engine)
    SQLModel.metadata.create_all(test_engine)
    yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def mock_storage(monkeypatch) -> Dict[str, bytes]:
    store: Dict[str, bytes] = {}

    def fake_put_bytes(key: str, data: bytes, content_type: str = "application/octet-stream"):
        store[key] = bytes(data)

    def fake_get_bytes(key: str) -> bytes:
        return store[key]

    def fake_delete_object(key: str):
        store.pop(key, None)

    def fake_delete_drafts(session_id: str) -> int:
        keys = [k for k in store if k.startswith(f"drafts/{session_id}/")]
        for key in keys:
            del store[key]
        return len(keys)

    for target in (storage_module, uploads_module, wizard_router):
        if hasattr(target, "put_bytes"):
            monkeypatch.setattr(target, "put_bytes", fake_put_bytes)
        if hasattr(target, "get_bytes"):
            monkeypatch.setattr(target, "get_bytes", fake_get_bytes)
        if hasattr(target, "delete_object"):
            monkeypatch.setattr(target, "delete_object", fake_delete_object)
        if hasattr(target, "delete_drafts"):
            monkeypatch.setattr(target, "delete_drafts", fake_delete_drafts)
    return store


@pytest.fixture
def sent_emails(monkeypatch):
    messages = []

    def fake_send_email(to, subject, text_body, html_body=None, sender_name=None, reply_to=None):
        messages.append(
            {
                "to": to,
                "subject": subject,
                "text": text_body,
                "html": html_body,
                "sender_name": sender_name,
                "reply_to": reply_to,
            }
        )

    monkeypatch.setattr(dispatch_module, "send_email", fake_send_email)
    return messages


@pytest.fixture
def session_store():
    return SessionStore(dispatch_timeout=5)


@pytest.fixture
def client(test_engine, setup_db, mock_storage, session_store):
    db_module.engine = test_engine

    def override_session():
        with Session(test_engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_store] = lambda: session_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ---------- engine fixtures ----------


@pytest.fixture
def lease_upload() -> UploadedFile:
    return UploadedFile(
        filename="Lease Agreement.pdf",
        content_type="application/pdf",
        size=2048,
        ref="drafts/test/lease.pdf",
        page_count=3,
    )


@pytest.fixture
def alice() -> SignerCandidate:
    return SignerCandidate(name="Alice Tenant", email="alice@example.com", role=SignerRole.PRIMARY_TENANT)


@pytest.fixture
def bob() -> SignerCandidate:
    return SignerCandidate(name="Bob Landlord", email="bob@example.com", role=SignerRole.LANDLORD)


@pytest.fixture
def wizard() -> WizardSession:
    return WizardSession()
