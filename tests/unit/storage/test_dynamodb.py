"""
Module: test_dynamodb.py
Description: Unit tests for the DynamoDB key-value store.

Tests get and set against a moto-mocked table, and ClientError
propagation.
"""

from unittest.mock import patch

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from roastsim.storage.dynamodb import DynamoDBKeyValueStore

TABLE_NAME = "test-roastsim-sessions"


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so boto3 never reaches a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def mock_sessions_table(aws_credentials):
    """
    Create mock DynamoDB table for the key-value store.

    Uses moto to mock AWS DynamoDB with the store's key schema.
    """
    with mock_aws():
        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')
        table = dynamodb.create_table(
            TableName=TABLE_NAME,
            KeySchema=[{'AttributeName': 'key', 'KeyType': 'HASH'}],
            AttributeDefinitions=[{'AttributeName': 'key', 'AttributeType': 'S'}],
            BillingMode='PAY_PER_REQUEST'
        )
        yield table


class TestDynamoDBKeyValueStore:
    """Test cases for DynamoDBKeyValueStore operations."""

    def test_store_initialization(self, mock_sessions_table):
        store = DynamoDBKeyValueStore(table_name=TABLE_NAME, region_name="us-east-1")

        assert store.table_name == TABLE_NAME
        assert hasattr(store, 'dynamodb')
        assert hasattr(store, 'table')

    def test_store_initialization_invalid_table_name(self):
        with pytest.raises(ValueError, match="table_name must be a non-empty string"):
            DynamoDBKeyValueStore(table_name="")

        with pytest.raises(ValueError, match="table_name must be a non-empty string"):
            DynamoDBKeyValueStore(table_name=None)

    def test_set_and_get(self, mock_sessions_table):
        store = DynamoDBKeyValueStore(table_name=TABLE_NAME, region_name="us-east-1")

        store.set("sim_session_params", '{"session_id": "sess-001"}')

        assert store.get("sim_session_params") == '{"session_id": "sess-001"}'
        item = mock_sessions_table.get_item(Key={'key': 'sim_session_params'})['Item']
        assert 'updated_at' in item

    def test_set_replaces_value(self, mock_sessions_table):
        store = DynamoDBKeyValueStore(table_name=TABLE_NAME, region_name="us-east-1")

        store.set("k", "first")
        store.set("k", "second")

        assert store.get("k") == "second"

    def test_get_missing_key(self, mock_sessions_table):
        store = DynamoDBKeyValueStore(table_name=TABLE_NAME, region_name="us-east-1")

        assert store.get("absent") is None

    def test_set_client_error(self, mock_sessions_table):
        store = DynamoDBKeyValueStore(table_name=TABLE_NAME, region_name="us-east-1")

        with patch.object(store.table, 'put_item', side_effect=ClientError(
            error_response={'Error': {'Code': 'ValidationException', 'Message': 'Test error'}},
            operation_name='PutItem'
        )):
            with pytest.raises(ClientError):
                store.set("k", "v")
