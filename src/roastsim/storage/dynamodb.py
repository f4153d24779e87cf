"""
Module: dynamodb.py
Description: DynamoDB-backed key-value store.

Stores each key as one item of a table keyed on a string "key"
attribute, with the value in a "value" attribute.

Key Components:
- DynamoDBKeyValueStore: get/set over a DynamoDB table
- Error handling: ClientError is logged and re-raised

Dependencies: boto3, botocore, typing
"""

from datetime import datetime, timezone
from typing import Optional

import boto3
from botocore.exceptions import ClientError

from roastsim.utils.logger import get_logger

logger = get_logger(__name__)


class DynamoDBKeyValueStore:
    """
    DynamoDB key-value store.

    Attributes:
        table_name: Name of the DynamoDB table
        dynamodb: boto3 DynamoDB resource
        table: boto3 DynamoDB table resource

    Example:
        >>> store = DynamoDBKeyValueStore(table_name="roastsim-sessions")
        >>> store.set("sim_session_params", "{...}")
        >>> store.get("sim_session_params")
        '{...}'
    """

    def __init__(self, table_name: str, region_name: Optional[str] = None):
        """
        Initialize DynamoDB store.

        Args:
            table_name: Name of the DynamoDB table
            region_name: AWS region (boto3 default resolution if omitted)

        Raises:
            ValueError: If table_name is empty or invalid
        """
        if not table_name or not isinstance(table_name, str):
            raise ValueError("table_name must be a non-empty string")

        self.table_name = table_name
        self.dynamodb = boto3.resource('dynamodb', region_name=region_name)
        self.table = self.dynamodb.Table(table_name)

        logger.info(
            "DynamoDB store initialized",
            table_name=table_name
        )

    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under key.

        Raises:
            ClientError: If the DynamoDB operation fails
        """
        try:
            response = self.table.get_item(Key={'key': key})
        except ClientError as e:
            logger.error(
                "Failed to read key from DynamoDB",
                key=key,
                error_code=e.response['Error']['Code'],
                table_name=self.table_name
            )
            raise

        item = response.get('Item')
        if not item:
            return None
        return item.get('value')

    def set(self, key: str, value: str) -> None:
        """
        Store value under key.

        Raises:
            ClientError: If the DynamoDB operation fails
        """
        try:
            self.table.put_item(
                Item={
                    'key': key,
                    'value': value,
                    'updated_at': datetime.now(timezone.utc).isoformat()
                }
            )
        except ClientError as e:
            logger.error(
                "Failed to write key to DynamoDB",
                key=key,
                error_code=e.response['Error']['Code'],
                table_name=self.table_name
            )
            raise

        logger.debug("Key stored in DynamoDB", key=key, table_name=self.table_name)
