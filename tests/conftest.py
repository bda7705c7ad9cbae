import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("AWS_BUCKET_NAME", "gallery-test")
os.environ.setdefault("AWS_REGION", "eu-west-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from core.database import Base
from core.storage import ObjectStore, StorageError

# Ensure models are registered with SQLAlchemy metadata
import models.image  # noqa: F401

BUCKET = os.environ["AWS_BUCKET_NAME"]
REGION = os.environ["AWS_REGION"]


class FakeObjectStore(ObjectStore):
    """In-memory bucket; flip fail_put / fail_delete to simulate S3 errors."""

    def __init__(self):
        super().__init__(client=None, bucket_name=BUCKET, region=REGION)
        self.objects = {}
        self.deleted = []
        self.fail_put = False
        self.fail_delete = False

    def put(self, key, data, content_type):
        if self.fail_put:
            raise StorageError(f"Failed to store object {key}", "ServiceUnavailable")
        self.objects[key] = (data, content_type)
        return self.public_url(key)

    def delete(self, key):
        if self.fail_delete:
            raise StorageError(f"Failed to delete object {key}", "AccessDenied")
        self.objects.pop(key, None)
        self.deleted.append(key)
        return True

    def close(self):
        pass


@pytest.fixture(scope="function")
def db_session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def object_store():
    return FakeObjectStore()
