"""
DynamoDB utility functions for data access.
"""
import os
from typing import Dict, List, Optional, Any
import boto3
from boto3.dynamodb.conditions import Key

# Singleton instance
_dynamo_instance = None


def get_dynamo() -> 'DynamoDBClient':
    """
    Get or create singleton DynamoDB client instance.

    This is the only way stores access DynamoDB. Never instantiate
    DynamoDBClient directly.

    Example:
        dynamo = get_dynamo()
        item = dynamo.get_item({"PK": "USER#123", "SK": "ONBOARDING"})

    Returns:
        DynamoDBClient: Singleton instance of DynamoDB client

    Raises:
        EnvironmentError: If TRACKER_TABLE_NAME environment variable is not set
    """
    global _dynamo_instance
    if _dynamo_instance is None:
        try:
            table_name = os.environ['TRACKER_TABLE_NAME']
        except KeyError:
            raise EnvironmentError(
                "TRACKER_TABLE_NAME environment variable not set. "
                "This variable must be set to the DynamoDB table name."
            )
        _dynamo_instance = DynamoDBClient(table_name)
    return _dynamo_instance


class DynamoDBClient:
    """Client for interacting with DynamoDB table."""

    def __init__(self, table_name: str):
        self.dynamodb = boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)

    def put_item(self, item: Dict[str, Any], only_if_new: bool = False) -> Dict[str, Any]:
        """
        Put a single item into the table.

        Args:
            item: Dictionary containing item attributes
            only_if_new: Reject the write if an item with the same key exists

        Returns:
            Response from DynamoDB

        Raises:
            botocore.exceptions.ClientError: ConditionalCheckFailedException
                when only_if_new is set and the key is taken
        """
        if only_if_new:
            return self.table.put_item(
                Item=item,
                ConditionExpression="attribute_not_exists(PK) AND attribute_not_exists(SK)"
            )
        return self.table.put_item(Item=item)

    def get_item(self, key: Dict[str, str]) -> Optional[Dict[str, Any]]:
        """
        Get a single item from the table.

        Args:
            key: Dictionary containing partition key and sort key

        Returns:
            Item if found, None otherwise
        """
        response = self.table.get_item(Key=key)
        return response.get('Item')

    def query_items(
        self,
        partition_key: str,
        partition_value: str,
        sort_key_condition: Optional[Key] = None
    ) -> List[Dict[str, Any]]:
        """
        Query items using partition key and optional sort key condition.

        Follows LastEvaluatedKey so callers always get every matching item.

        Args:
            partition_key: Name of partition key
            partition_value: Value of partition key
            sort_key_condition: Optional sort key condition

        Returns:
            List of matching items
        """
        key_condition = Key(partition_key).eq(partition_value)
        if sort_key_condition:
            key_condition = key_condition & sort_key_condition

        kwargs: Dict[str, Any] = {"KeyConditionExpression": key_condition}
        items: List[Dict[str, Any]] = []
        while True:
            response = self.table.query(**kwargs)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    def delete_item(self, key: Dict[str, str]) -> Dict[str, Any]:
        """
        Delete an item from the table.

        Args:
            key: Dictionary containing partition key and sort key

        Returns:
            Response from DynamoDB
        """
        return self.table.delete_item(Key=key)


def create_pk(user_id: str) -> str:
    """Create partition key from user ID."""
    return f"USER#{user_id}"


def create_relationship_pk(relationship_id: str) -> str:
    """Create partition key for a relationship record."""
    return f"RELATIONSHIP#{relationship_id}"


RELATIONSHIP_SK = "METADATA"
ONBOARDING_SK = "ONBOARDING"


def create_status_sk(week_start_date: str) -> str:
    """
    Create sort key for weekly status entries.

    Args:
        week_start_date: ISO format date string of week start (always Monday)

    Returns:
        Sort key in format "STATUS#{week_start_date}"
    """
    return f"STATUS#{week_start_date}"


def create_suggestion_prefix(week_start_date: str) -> str:
    """Create sort key prefix shared by all suggestions of a week."""
    return f"SUGGESTION#{week_start_date}#"


def create_suggestion_category_prefix(week_start_date: str, category_id: str) -> str:
    """Create sort key prefix shared by the suggestions of one category in a week."""
    return f"{create_suggestion_prefix(week_start_date)}{category_id}#"


def create_suggestion_sk(week_start_date: str, category_id: str, title_slug: str) -> str:
    """
    Create sort key for a weekly suggestion.

    The key makes (user, week, category, title) unique, so a conditional put
    rejects a second copy of the same suggestion.

    Args:
        week_start_date: ISO format date string of week start (always Monday)
        category_id: Category identifier
        title_slug: Slugified suggestion title

    Returns:
        Sort key in format "SUGGESTION#{week_start_date}#{category_id}#{title_slug}"
    """
    return f"{create_suggestion_category_prefix(week_start_date, category_id)}{title_slug}"
