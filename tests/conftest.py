import logging
import os
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from cryptography.fernet import Fernet

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import StaticPool, create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from photovault.config import StorageConfig  # noqa: E402
from photovault.database import Base  # noqa: E402
from photovault.deps import get_db, get_storage  # noqa: E402
from photovault.main import app  # noqa: E402
from photovault.storage import FileSystemStorage, PhotoStorage, S3Storage  # noqa: E402
from photovault.utils.jwt import create_access_token  # noqa: E402

# Configure basic logging for tests
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def secrets_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JWT_SECRET_KEY", "testsecret")
    monkeypatch.setenv("BACKEND_PASSWORD", "supersecret")
    monkeypatch.setenv("CREDENTIALS_SECRET", Fernet.generate_key().decode())


@pytest.fixture
def s3_client() -> MagicMock:
    """Stand-in for a boto3 S3 client; every call succeeds by default."""
    client = MagicMock()
    client.delete_objects.return_value = {"Deleted": []}
    return client


@pytest.fixture
def s3_config() -> StorageConfig:
    return StorageConfig(bucket="photovault-test", host="photos.example.com")


@pytest.fixture
def s3_storage(s3_config: StorageConfig, s3_client: MagicMock) -> S3Storage:
    return S3Storage(s3_config, client=s3_client)


@pytest.fixture
def local_photo(tmp_path: Path) -> Path:
    photo = tmp_path / "upload.jpg"
    photo.write_bytes(b"\xff\xd8\xff\xe0fake-jpeg")
    return photo


@pytest.fixture
def fs_storage(tmp_path: Path) -> FileSystemStorage:
    return FileSystemStorage(StorageConfig(local_root=str(tmp_path / "store")))


# Database Fixture (Overrides get_db dependency)
@pytest.fixture
def session() -> Generator[Session, None, None]:
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(fs_storage: FileSystemStorage) -> PhotoStorage:
    return fs_storage


@pytest.fixture
def client(session: Session, storage: PhotoStorage) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token('owner')}"}
