import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from examhub.core.database import Base
from examhub.utils import deps as deps_utils
import main
from fastapi.testclient import TestClient
from examhub.crud.user import user as crud_user
from examhub.crud.question_bank import question_bank as crud_question_bank
from examhub.crud.question import question as crud_question
from examhub.models.exam_token import ExamToken
from examhub.services.exam_token import exam_token_service
from examhub.core.config import settings

test_db_url = settings.TEST_DATABASE_URL or "sqlite:///./test.db"

@pytest.fixture(scope="session")
def database_engine():
    if test_db_url.startswith("sqlite"):
        engine = create_engine(test_db_url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(test_db_url)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()
    if test_db_url.startswith("sqlite") and os.path.exists("./test.db"):
        os.remove("./test.db")

@pytest.fixture(scope="function")
def db_session(database_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=database_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        # Tests commit freely, so wipe every table to keep them independent
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
        db.close()

@pytest.fixture(scope="function")
def client(db_session):
    main.app.dependency_overrides[deps_utils.get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_transactional_db] = lambda: db_session
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()

@pytest.fixture
def session_factory(database_engine):
    """Independent sessions on the test database, e.g. one per thread."""
    return sessionmaker(autocommit=False, autoflush=False, bind=database_engine)

@pytest.fixture(scope="function")
def committing_client(db_session, session_factory):
    # Writes go through the real get_transactional_db, so they commit or roll back for real.
    # Own MonkeyPatch so a test's monkeypatch.undo() does not revert the session patch.
    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(deps_utils, "SessionLocal", session_factory)
        main.app.dependency_overrides[deps_utils.get_db] = lambda: db_session
        with TestClient(main.app, raise_server_exceptions=False) as test_client:
            yield test_client
        main.app.dependency_overrides.clear()

@pytest.fixture
def user_factory(db_session):
    def _user_factory(balance="0.00", is_active=True, full_name="Test User"):
        user_data = {
            "public_id": str(uuid.uuid4()),
            "full_name": full_name,
            "email": f"user-{uuid.uuid4()}@test.com",
            "is_active": is_active,
            "balance": Decimal(balance)
        }
        return crud_user.create(db_session, obj_in=user_data)
    return _user_factory

@pytest.fixture
def bank_factory(db_session):
    def _bank_factory(price="5.00", title="Past Questions 2023"):
        return crud_question_bank.create(
            db_session,
            obj_in={"title": title, "year": 2023, "price": Decimal(price), "subject": "Mathematics"}
        )
    return _bank_factory

@pytest.fixture
def question_factory(db_session):
    def _question_factory(bank, text="What is 2+2?", options=None, correct_index=None, correct_answer_text=None):
        return crud_question.create_with_options(
            db_session,
            bank_id=bank.id,
            text=text,
            options=options or ["3", "4", "5"],
            correct_index=correct_index,
            correct_answer_text=correct_answer_text
        )
    return _question_factory

@pytest.fixture
def exam_token_factory(db_session):
    def _exam_token_factory(bank, user, ttl_minutes=None, expired=False):
        token_row = exam_token_service.issue(db_session, bank_id=bank.id, user_id=user.id, ttl_minutes=ttl_minutes)
        if expired:
            db_session.query(ExamToken).filter(ExamToken.id == token_row.id).update(
                {ExamToken.expires_at: datetime.utcnow() - timedelta(minutes=1)},
                synchronize_session="fetch"
            )
        db_session.commit()
        return token_row.token
    return _exam_token_factory

@pytest.fixture
def paid_bank(bank_factory, question_factory):
    """A 5.00 bank with two eligible questions and one question without an answer key."""
    bank = bank_factory(price="5.00")
    question_factory(bank, text="What is 2+2?", options=["3", "4", "5"], correct_index=1)
    question_factory(bank, text="Capital of France?", options=["Paris", "Rome"], correct_answer_text="  paris ")
    question_factory(bank, text="Draft question", options=["a", "b"])
    return bank

@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        token = jwt.encode({"sub": str(user.id)}, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers

@pytest.fixture
def admin_headers():
    return {"X-API-Key": settings.ADMIN_API_KEY}
