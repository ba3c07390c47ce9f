"""DynamoDB implementation of CurriculumRepository."""

from datetime import date, datetime
from typing import Any, Dict, Optional

import aioboto3
from boto3.dynamodb.conditions import Key

from ..domain.entities.curriculum import (
    CurriculumTarget,
    CurriculumTracking,
    CurriculumType,
    SessionTarget,
)
from ..domain.interfaces.curriculum_repository import CurriculumRepository

TARGET_INDEX = "target-index"
LOOKUP_INDEX = "lookup-index"


def _target_value(target: CurriculumTarget) -> str:
    if isinstance(target, SessionTarget):
        return f"session:{target.session.id}"
    return f"group:{target.group_id}"


def _lookup_value(target: CurriculumTarget) -> str:
    if isinstance(target, SessionTarget):
        return f"template:{target.session.template_key}"
    return f"group:{target.group_id}"


class DynamoDBCurriculumRepository(CurriculumRepository):
    """DynamoDB repository for curriculum tracking records.

    The table is keyed by ``id`` and has two indexes sorted by
    ``session_date``: ``target-index`` (partition ``target``, the session
    instance or group) and ``lookup-index`` (partition ``lookup``, the
    recurring template or group) used to find earlier instances.
    """

    def __init__(self, table_name: str, region_name: str = "us-east-1"):
        """Initialize the DynamoDB curriculum repository.

        Args:
            table_name: The name of the DynamoDB table.
            region_name: AWS region name (default: us-east-1).
        """
        self.table_name = table_name
        self.region_name = region_name
        self._session = aioboto3.Session()

    async def get_current(
        self, target: CurriculumTarget, session_date: date
    ) -> Optional[CurriculumTracking]:
        condition = Key("target").eq(_target_value(target))
        if not isinstance(target, SessionTarget):
            condition = condition & Key("session_date").eq(session_date.isoformat())

        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            response = await table.query(
                IndexName=TARGET_INDEX,
                KeyConditionExpression=condition,
                Limit=1,
            )

        items = response.get("Items", [])
        return self._item_to_record(items[0]) if items else None

    async def find_previous(
        self, target: CurriculumTarget, session_date: date
    ) -> Optional[CurriculumTracking]:
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            response = await table.query(
                IndexName=LOOKUP_INDEX,
                KeyConditionExpression=(
                    Key("lookup").eq(_lookup_value(target))
                    & Key("session_date").lt(session_date.isoformat())
                ),
                ScanIndexForward=False,
                Limit=1,
            )

        items = response.get("Items", [])
        return self._item_to_record(items[0]) if items else None

    async def save(self, record: CurriculumTracking) -> CurriculumTracking:
        """Save a record to DynamoDB.

        Raises:
            Exception: If the save operation fails.
        """
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            await table.put_item(Item=self._record_to_item(record))
        return record

    async def delete(self, record_id: str) -> None:
        """Delete a record from DynamoDB.

        Raises:
            ValueError: If the record is not found.
        """
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            response = await table.get_item(Key={"id": record_id})
            if "Item" not in response:
                raise ValueError(f"Curriculum tracking with id {record_id} not found")
            await table.delete_item(Key={"id": record_id})

    def _record_to_item(self, record: CurriculumTracking) -> Dict[str, Any]:
        """Convert a record to a DynamoDB item.

        Args:
            record: The curriculum tracking record.

        Returns:
            Dict: The DynamoDB item representation.
        """
        if record.session_id:
            target = f"session:{record.session_id}"
            lookup = f"template:{record.template_key}"
        else:
            target = f"group:{record.group_id}"
            lookup = target

        item = {
            "id": record.id,
            "target": target,
            "lookup": lookup,
            "curriculum_type": record.curriculum_type.value,
            "curriculum_level": record.curriculum_level,
            "current_lesson": record.current_lesson,
            "prompt_answered": record.prompt_answered,
            "created_at": record.created_at.isoformat(),
            "updated_at": record.updated_at.isoformat(),
        }
        if record.session_date:
            item["session_date"] = record.session_date.isoformat()
        if record.session_id:
            item["session_id"] = record.session_id
            item["template_key"] = record.template_key
        if record.group_id:
            item["group_id"] = record.group_id
        return item

    def _item_to_record(self, item: Dict[str, Any]) -> CurriculumTracking:
        """Convert a DynamoDB item to a record.

        Args:
            item: The DynamoDB item.

        Returns:
            CurriculumTracking: The curriculum tracking record.
        """
        return CurriculumTracking(
            id=item["id"],
            session_id=item.get("session_id"),
            group_id=item.get("group_id"),
            template_key=item.get("template_key"),
            session_date=date.fromisoformat(item["session_date"]) if item.get("session_date") else None,
            curriculum_type=CurriculumType(item["curriculum_type"]),
            curriculum_level=item["curriculum_level"],
            # DynamoDB returns numbers as Decimal
            current_lesson=int(item["current_lesson"]),
            prompt_answered=bool(item.get("prompt_answered", False)),
            created_at=datetime.fromisoformat(item["created_at"]),
            updated_at=datetime.fromisoformat(item["updated_at"]),
        )
