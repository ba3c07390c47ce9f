"""Tests for DynamoDB curriculum repository."""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from caseload_planner.domain.entities import CurriculumTracking, CurriculumType, GroupTarget, SessionTarget
from caseload_planner.infrastructure.dynamodb_curriculum_repository import (
    LOOKUP_INDEX,
    TARGET_INDEX,
    DynamoDBCurriculumRepository,
)

MONDAY = date(2026, 10, 12)


@pytest.fixture
def mock_dynamodb_table():
    """Create a mock DynamoDB table."""
    return AsyncMock()


@pytest.fixture
def mock_dynamodb_resource(mock_dynamodb_table):
    """Create a mock DynamoDB resource."""
    mock_resource = MagicMock()
    mock_resource.Table = AsyncMock(return_value=mock_dynamodb_table)
    return mock_resource


@pytest.fixture
def mock_aioboto3_session(mock_dynamodb_resource):
    """Create a mock aioboto3 session."""
    with patch("caseload_planner.infrastructure.dynamodb_curriculum_repository.aioboto3.Session") as mock_session_class:
        mock_session_instance = MagicMock()
        mock_session_class.return_value = mock_session_instance

        mock_session_instance.resource.return_value.__aenter__ = AsyncMock(return_value=mock_dynamodb_resource)
        mock_session_instance.resource.return_value.__aexit__ = AsyncMock(return_value=None)

        yield mock_session_instance


@pytest.fixture
def repository(mock_aioboto3_session):
    """Create a DynamoDB curriculum repository instance."""
    return DynamoDBCurriculumRepository(table_name="test-curriculum", region_name="us-east-1")


@pytest.fixture
def sample_item():
    """Create a sample DynamoDB item as returned by a query."""
    return {
        "id": "record-1",
        "target": "session:session-1",
        "lookup": "template:me|student-1|1|09:00",
        "session_id": "session-1",
        "template_key": "me|student-1|1|09:00",
        "session_date": "2026-10-12",
        "curriculum_type": "SPIRE",
        "curriculum_level": "3",
        "current_lesson": Decimal("5"),
        "prompt_answered": False,
        "created_at": "2026-10-12T09:00:00",
        "updated_at": "2026-10-12T09:05:00",
    }


class TestDynamoDBCurriculumRepository:
    """Test cases for DynamoDBCurriculumRepository."""

    @pytest.mark.asyncio
    async def test_save_session_record(self, repository, mock_dynamodb_table, make_session):
        session = make_session("session-1", session_date=MONDAY)
        record = CurriculumTracking(
            id="record-1",
            curriculum_type=CurriculumType.SPIRE,
            curriculum_level="3",
            current_lesson=5,
            session_id=session.id,
            session_date=MONDAY,
            template_key=session.template_key,
            created_at=datetime(2026, 10, 12, 9, 0, 0),
            updated_at=datetime(2026, 10, 12, 9, 0, 0),
        )

        result = await repository.save(record)

        assert result == record
        item = mock_dynamodb_table.put_item.call_args.kwargs["Item"]
        assert item["target"] == "session:session-1"
        assert item["lookup"] == "template:me|student-1|1|09:00"
        assert item["session_date"] == "2026-10-12"
        assert item["curriculum_type"] == "SPIRE"
        assert "group_id" not in item

    @pytest.mark.asyncio
    async def test_save_group_record(self, repository, mock_dynamodb_table):
        record = CurriculumTracking(
            curriculum_type=CurriculumType.REVEAL_MATH,
            curriculum_level="K",
            group_id="group-a",
            session_date=MONDAY,
        )

        await repository.save(record)

        item = mock_dynamodb_table.put_item.call_args.kwargs["Item"]
        assert item["target"] == "group:group-a"
        assert item["lookup"] == "group:group-a"
        assert "session_id" not in item

    @pytest.mark.asyncio
    async def test_get_current_converts_item(self, repository, mock_dynamodb_table, sample_item, make_session):
        mock_dynamodb_table.query.return_value = {"Items": [sample_item]}

        record = await repository.get_current(SessionTarget(session=make_session("session-1")), MONDAY)

        assert record.id == "record-1"
        assert record.current_lesson == 5
        assert isinstance(record.current_lesson, int)
        assert record.session_date == MONDAY
        assert mock_dynamodb_table.query.call_args.kwargs["IndexName"] == TARGET_INDEX

    @pytest.mark.asyncio
    async def test_get_current_missing(self, repository, mock_dynamodb_table):
        mock_dynamodb_table.query.return_value = {"Items": []}

        assert await repository.get_current(GroupTarget(group_id="group-a"), MONDAY) is None

    @pytest.mark.asyncio
    async def test_find_previous_queries_latest_first(self, repository, mock_dynamodb_table, sample_item, make_session):
        mock_dynamodb_table.query.return_value = {"Items": [sample_item]}

        record = await repository.find_previous(SessionTarget(session=make_session("session-2")), date(2026, 10, 19))

        kwargs = mock_dynamodb_table.query.call_args.kwargs
        assert kwargs["IndexName"] == LOOKUP_INDEX
        assert kwargs["ScanIndexForward"] is False
        assert kwargs["Limit"] == 1
        assert record.session_id == "session-1"

    @pytest.mark.asyncio
    async def test_delete(self, repository, mock_dynamodb_table, sample_item):
        mock_dynamodb_table.get_item.return_value = {"Item": sample_item}

        await repository.delete("record-1")

        mock_dynamodb_table.delete_item.assert_called_once_with(Key={"id": "record-1"})

    @pytest.mark.asyncio
    async def test_delete_not_found(self, repository, mock_dynamodb_table):
        mock_dynamodb_table.get_item.return_value = {}

        with pytest.raises(ValueError, match="not found"):
            await repository.delete("missing")

        mock_dynamodb_table.delete_item.assert_not_called()
