"""
Memo Registry - Test Configuration and Fixtures
"""
import os
from typing import Generator

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['AUTO_CREATE_TABLES'] = 'false'
os.environ['ENFORCE_SEQUENTIAL_APPROVALS'] = 'false'

from app.main import app
from app.core.config import settings
from app.db.database import Base, get_db
from app.models.user import User, UserRole, Department
from app.models.memo import Memo, MemoType, MemoPriority, MemoStatus
from app.models.document import Document, DocumentStatus

fake = Faker()

# Test database setup: one shared in-memory connection
test_engine = create_engine(
    'sqlite://',
    connect_args={'check_same_thread': False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=test_engine, autocommit=False, autoflush=False)


@pytest.fixture(scope='function')
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create test client with database override"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def signature_dir(tmp_path, monkeypatch):
    """Keep uploaded and rendered signatures inside the test's temp dir"""
    storage = tmp_path / 'uploads'
    storage.mkdir()
    monkeypatch.setattr(settings, 'SIGNATURE_STORAGE_DIR', str(storage))
    return storage


@pytest.fixture
def make_department(db_session: Session):
    def factory(**overrides) -> Department:
        department = Department(
            name=overrides.pop('name', f"{fake.unique.word().title()} Department"),
            code=overrides.pop('code', fake.unique.bothify(text='DEP-###')),
            is_active=True,
            **overrides,
        )
        db_session.add(department)
        db_session.commit()
        db_session.refresh(department)
        return department
    return factory


@pytest.fixture
def make_user(db_session: Session):
    def factory(department: Department = None, **overrides) -> User:
        user = User(
            email=overrides.pop('email', fake.unique.email()),
            first_name=overrides.pop('first_name', fake.first_name()),
            last_name=overrides.pop('last_name', fake.last_name()),
            role=overrides.pop('role', UserRole.STAFF),
            department_id=department.id if department else None,
            is_active=True,
            **overrides,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return factory


@pytest.fixture
def make_memo(db_session: Session, make_user):
    counter = {'value': 0}

    def factory(created_by: User = None, **overrides) -> Memo:
        counter['value'] += 1
        creator = created_by or make_user()
        memo = Memo(
            reference_number=overrides.pop('reference_number', f"MEM-2025-{counter['value']:03d}"),
            subject=overrides.pop('subject', fake.sentence(nb_words=6)),
            body=overrides.pop('body', fake.paragraph(nb_sentences=5)),
            type=overrides.pop('type', MemoType.APPROVAL),
            priority=overrides.pop('priority', MemoPriority.MEDIUM),
            status=overrides.pop('status', MemoStatus.DRAFT),
            created_by_id=creator.id,
            **overrides,
        )
        db_session.add(memo)
        db_session.commit()
        db_session.refresh(memo)
        return memo
    return factory


@pytest.fixture
def make_document(db_session: Session, make_user):
    counter = {'value': 0}

    def factory(created_by: User = None, current_department: Department = None, **overrides) -> Document:
        counter['value'] += 1
        creator = created_by or make_user()
        document = Document(
            reference_number=overrides.pop('reference_number', f"DOC-2025-{counter['value']:03d}"),
            title=overrides.pop('title', fake.sentence(nb_words=5)),
            description=overrides.pop('description', fake.sentence()),
            priority=overrides.pop('priority', MemoPriority.MEDIUM),
            status=overrides.pop('status', DocumentStatus.PENDING),
            is_external=overrides.pop('is_external', False),
            current_department_id=current_department.id if current_department else None,
            created_by_id=creator.id,
            **overrides,
        )
        db_session.add(document)
        db_session.commit()
        db_session.refresh(document)
        return document
    return factory


@pytest.fixture
def department(make_department) -> Department:
    return make_department(name='Finance', code='FIN')


@pytest.fixture
def creator(make_user, department) -> User:
    return make_user(department=department, first_name='Amina', last_name='Bello')


@pytest.fixture
def approvers(make_user, department):
    """Three approvers: department head, MD and an auditor"""
    return [
        make_user(department=department, role=UserRole.DEPARTMENT_HEAD),
        make_user(department=department, role=UserRole.MD),
        make_user(role=UserRole.AUDITOR),
    ]
