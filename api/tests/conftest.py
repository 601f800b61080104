"""
Resource Catalog - Test Configuration and Fixtures
"""
import os
import tempfile
from typing import Dict, Generator, Optional

import pytest
from faker import Faker

# Set testing environment before any catalog module reads it
os.environ['ENV'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['LOCAL_STORAGE_DIR'] = tempfile.mkdtemp(prefix='catalog-test-')
os.environ['PUBLIC_BASE_URL'] = 'http://testserver/files'
for _var in ('AWS_ACCESS_KEY_ID', 'AWS_SECRET_ACCESS_KEY', 'S3_BUCKET_NAME'):
    os.environ[_var] = ''

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from catalog.auth.jwt_utils import create_access_token
from catalog.config.database import Base, SessionLocal, engine, init_db
from catalog.core.exceptions import StorageError
from catalog.main import app
from catalog.models.program import Program
from catalog.utils.db_utils import create_program
from catalog.utils.s3_utils import ObjectStore, get_object_store

fake = Faker()


class InMemoryObjectStore(ObjectStore):
    """Object store double that keeps blobs in a dict and can be told to fail"""

    def __init__(self):
        self.blobs: Dict[str, bytes] = {}
        self.store_calls = 0
        self.fail_store: Optional[Exception] = None
        self.fail_delete: Optional[Exception] = None

    def store(self, data: bytes, path: str, content_type: Optional[str] = None) -> str:
        self.store_calls += 1
        if self.fail_store is not None:
            raise self.fail_store
        self.blobs[path] = data
        return self.public_url(path)

    def public_url(self, path: str) -> str:
        return f"https://blobs.test/{path}"

    def delete(self, path: str) -> None:
        if self.fail_delete is not None:
            raise self.fail_delete
        self.blobs.pop(path, None)


@pytest.fixture(scope='function')
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    init_db()
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def failing_object_store() -> InMemoryObjectStore:
    store = InMemoryObjectStore()
    store.fail_store = StorageError("bucket unavailable")
    return store


@pytest.fixture
def client(db_session: Session, object_store: InMemoryObjectStore) -> Generator[TestClient, None, None]:
    """Test client sharing the in-memory database, with the object store swapped out"""
    app.dependency_overrides[get_object_store] = lambda: object_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_program(db_session: Session):
    """Factory creating programs with sensible defaults"""
    def _make(name: Optional[str] = None, program_type: str = 'undergraduate',
              semesters: int = 4, specializations=None) -> Program:
        return create_program(
            db_session,
            name=name or fake.unique.company(),
            program_type=program_type,
            semesters=semesters,
            specializations=specializations if specializations is not None else [fake.job()]
        )
    return _make


@pytest.fixture
def program(make_program) -> Program:
    """A four-semester undergraduate program"""
    return make_program(name='B.Tech', semesters=4)


@pytest.fixture
def admin_headers() -> dict:
    """Bearer token headers for an administrator"""
    token = create_access_token(fake.email(), extra_claims={'role': 'admin'})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def student_headers() -> dict:
    """Bearer token headers for an authenticated non-admin user"""
    token = create_access_token(fake.email(), extra_claims={'role': 'student'})
    return {'Authorization': f'Bearer {token}'}
