"""
DynamoDB-backed collaborator stores.

Single table layout:
    USER#<id>          STATUS#<week>                          weekly status
    USER#<id>          ONBOARDING                             onboarding answers
    USER#<id>          HINT#<hint_id>                         hints left for the user
    USER#<id>          SUGGESTION#<week>#<category>#<slug>    weekly suggestions
    RELATIONSHIP#<id>  METADATA                               relationship record

Store methods are coroutines so the generator can await them. The boto3
calls underneath are synchronous, so each one runs in a worker thread
(asyncio.to_thread) and concurrent categories do not block the event loop.
Statuses, onboarding answers and hints are written by other services; these
stores only read them.
"""
import asyncio
import json
import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from helping_hand.models.profile import PartnerHint, Relationship
from helping_hand.models.status import UserStatus
from helping_hand.models.suggestion import SourceType, Suggestion, utc_now
from helping_hand.services.exceptions import DuplicateSuggestionError, PersistenceError
from helping_hand.services.utils import slugify
from helping_hand.utils.dynamo import (
    ONBOARDING_SK,
    RELATIONSHIP_SK,
    create_pk,
    create_relationship_pk,
    create_status_sk,
    create_suggestion_category_prefix,
    create_suggestion_prefix,
    create_suggestion_sk,
    get_dynamo,
)
from helping_hand.utils.logging import logger

_KEY_FIELDS = ("PK", "SK")


def to_item(data: Dict[str, Any]) -> Dict[str, Any]:
    """Convert JSON-safe data to DynamoDB types (floats become Decimal)."""
    return json.loads(json.dumps(data), parse_float=Decimal)


def from_item(item: Dict[str, Any]) -> Dict[str, Any]:
    """Strip table keys from an item."""
    return {key: value for key, value in item.items() if key not in _KEY_FIELDS}


class StatusStore:
    """Weekly status assessments."""

    def __init__(self, dynamo=None):
        self.dynamo = dynamo or get_dynamo()

    async def get_status(self, user_id: str, week_start_date: date) -> Optional[UserStatus]:
        item = await asyncio.to_thread(self.dynamo.get_item, {
            "PK": create_pk(user_id),
            "SK": create_status_sk(week_start_date.isoformat())
        })
        if not item:
            return None
        return UserStatus(**from_item(item))


class RelationshipStore:
    """Relationship records."""

    def __init__(self, dynamo=None):
        self.dynamo = dynamo or get_dynamo()

    async def get_relationship(self, relationship_id: str) -> Optional[Relationship]:
        item = await asyncio.to_thread(self.dynamo.get_item, {
            "PK": create_relationship_pk(relationship_id),
            "SK": RELATIONSHIP_SK
        })
        if not item:
            return None
        data = from_item(item)
        return Relationship(
            id=relationship_id,
            member_a_id=data.get("member_a_id") or data["partner_a_id"],
            member_b_id=data.get("member_b_id") or data["partner_b_id"],
            living_together=bool(data.get("living_together", False)),
            duration=data.get("duration"),
            status=data.get("status")
        )


class ProfileStore:
    """Onboarding answers, returned as stored."""

    def __init__(self, dynamo=None):
        self.dynamo = dynamo or get_dynamo()

    async def get_onboarding(self, user_id: str) -> Optional[Dict[str, Any]]:
        item = await asyncio.to_thread(self.dynamo.get_item, {"PK": create_pk(user_id), "SK": ONBOARDING_SK})
        if not item:
            return None
        record = from_item(item)
        record.setdefault("user_id", user_id)
        return record


class HintStore:
    """Hints a partner left for a user."""

    def __init__(self, dynamo=None):
        self.dynamo = dynamo or get_dynamo()

    async def get_active_hints_for_partner(self, user_id: str) -> List[PartnerHint]:
        """
        Get the active hints addressed to a user.

        Args:
            user_id: User the hints were left for

        Returns:
            Active hints, oldest first
        """
        items = await asyncio.to_thread(
            self.dynamo.query_items,
            partition_key="PK",
            partition_value=create_pk(user_id),
            sort_key_condition=Key("SK").begins_with("HINT#")
        )
        hints = []
        for item in items:
            if not item.get("is_active", True):
                continue
            hints.append(PartnerHint(
                id=item["SK"].split("#", 1)[1],
                hint_type=item["hint_type"],
                hint_text=item["hint_text"]
            ))
        return hints


class SuggestionStore:
    """Weekly suggestions, unique per user, week, category and title."""

    def __init__(self, dynamo=None):
        self.dynamo = dynamo or get_dynamo()

    async def get_suggestions(self, user_id: str, week_start_date: date) -> List[Suggestion]:
        items = await asyncio.to_thread(
            self.dynamo.query_items,
            partition_key="PK",
            partition_value=create_pk(user_id),
            sort_key_condition=Key("SK").begins_with(create_suggestion_prefix(week_start_date.isoformat()))
        )
        return [Suggestion(**from_item(item)) for item in items]

    async def insert(self, suggestion: Suggestion) -> Suggestion:
        """
        Store a new suggestion.

        Args:
            suggestion: Suggestion to store; an id is assigned when missing

        Returns:
            The stored suggestion

        Raises:
            DuplicateSuggestionError: If the same title is already stored for
                the user, week and category
            PersistenceError: For any other write failure
        """
        now = utc_now()
        stored = suggestion.model_copy(update={
            "id": suggestion.id or str(uuid.uuid4()),
            "created_at": now,
            "updated_at": now
        })
        item = to_item(stored.model_dump(mode="json"))
        item.update({
            "PK": create_pk(stored.user_id),
            "SK": create_suggestion_sk(
                stored.week_start_date.isoformat(),
                stored.category_id,
                slugify(stored.title)
            )
        })

        try:
            await asyncio.to_thread(self.dynamo.put_item, item, only_if_new=True)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code == "ConditionalCheckFailedException":
                raise DuplicateSuggestionError(
                    f"Suggestion '{stored.title}' already exists for week "
                    f"{stored.week_start_date} in {stored.category_id}"
                ) from e
            raise PersistenceError(f"Failed to store suggestion: {str(e)}") from e

        logger.info("Stored suggestion", extra={
            "user_id": stored.user_id,
            "suggestion_id": stored.id,
            "category_id": stored.category_id
        })
        return stored

    async def delete_suggestions(self, user_id: str, week_start_date: date, category_id: str) -> int:
        """
        Delete the template suggestions of one category in a week.

        Used before a regeneration stores the category's replacement set.

        Args:
            user_id: Owner of the suggestions
            week_start_date: Monday of the week
            category_id: Category to clear

        Returns:
            Number of deleted suggestions

        Raises:
            PersistenceError: If the suggestions cannot be read or deleted
        """
        prefix = create_suggestion_category_prefix(week_start_date.isoformat(), category_id)
        try:
            items = await asyncio.to_thread(
                self.dynamo.query_items,
                partition_key="PK",
                partition_value=create_pk(user_id),
                sort_key_condition=Key("SK").begins_with(prefix)
            )
            deleted = 0
            for item in items:
                if item.get("source_type", SourceType.TEMPLATE.value) != SourceType.TEMPLATE.value:
                    continue
                await asyncio.to_thread(self.dynamo.delete_item, {"PK": item["PK"], "SK": item["SK"]})
                deleted += 1
        except ClientError as e:
            raise PersistenceError(f"Failed to clear {category_id} suggestions: {str(e)}") from e

        logger.info("Cleared suggestions", extra={
            "user_id": user_id,
            "week_start_date": week_start_date.isoformat(),
            "category_id": category_id,
            "deleted_count": deleted
        })
        return deleted
