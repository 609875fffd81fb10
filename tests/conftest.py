"""Shared test fixtures and configuration."""

import pytest
from unittest.mock import MagicMock, Mock

from botocore.exceptions import ClientError

# Variables read by the scripts; cleared so a local .env can't leak into tests
ADDON_ENV_VARS = [
    "REDIS_URL",
    "CELLAR_ADDON_HOST",
    "CELLAR_ADDON_KEY_ID",
    "CELLAR_ADDON_KEY_SECRET",
    "MYSQL_ADDON_URI",
    "POSTGRESQL_ADDON_URI",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without add-on credentials in the environment."""
    for name in ADDON_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def client_error(code: str, operation: str = "HeadObject", message: str = "error") -> ClientError:
    """Build a botocore ClientError with the given error code."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@pytest.fixture
def mock_s3_client():
    """Mock boto3 S3 client with an empty bucket."""
    client = Mock()
    client.list_objects_v2.return_value = {"KeyCount": 0, "IsTruncated": False}
    client.head_object.return_value = {
        "ContentLength": 42,
        "ContentType": "text/plain",
        "ETag": '"abc123"',
        "Metadata": {},
    }
    client.generate_presigned_url.return_value = "https://cellar.example.com/bucket/demo.txt?sig=1"
    return client


@pytest.fixture
def mock_engine():
    """Mock SQLAlchemy engine; the connection it hands out is engine.conn."""
    engine = MagicMock()
    engine.conn = engine.connect.return_value
    return engine
