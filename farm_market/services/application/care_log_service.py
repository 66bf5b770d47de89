"""
Application service: care history of trees.
"""
from typing import Any, Dict, List, Optional
import logging

from farm_market.domain.errors import NotFoundError, ValidationError
from farm_market.domain.models import RowId, TreeCareLog
from farm_market.infrastructure.api_constants import DatabaseTables
from farm_market.infrastructure.database_client import DatabaseClient
from farm_market.utils.timestamps import utcnow_iso

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("activity_type", "description", "notes", "images")


class CareLogService:
    """Records watering, pruning, fertilizing and similar activities per tree."""

    def __init__(self, db: DatabaseClient):
        self.db = db

    async def list_logs(
        self,
        tree_id: Optional[RowId] = None,
        limit: Optional[int] = None,
    ) -> List[TreeCareLog]:
        filters = {"tree_id": tree_id} if tree_id is not None else None
        rows = await self.db.select(
            DatabaseTables.TREE_CARE_LOGS,
            filters=filters,
            order="performed_at.desc",
            limit=limit,
        )
        return [TreeCareLog(**row) for row in rows]

    async def create_log(
        self,
        tree_id: RowId,
        activity_type: str,
        description: str,
        notes: Optional[str] = None,
        performed_by: Optional[str] = None,
        images: Optional[List[str]] = None,
    ) -> TreeCareLog:
        if not tree_id or not activity_type or not description:
            raise ValidationError("Tree ID, activity type, and description are required")

        rows = await self.db.insert(
            DatabaseTables.TREE_CARE_LOGS,
            {
                "tree_id": tree_id,
                "activity_type": activity_type,
                "description": description,
                "notes": notes,
                "performed_by": performed_by,
                "images": images or [],
                "performed_at": utcnow_iso(),
            },
        )
        log = TreeCareLog(**rows[0])
        logger.info(f"Logged {activity_type} for tree {tree_id}")
        return log

    async def update_log(self, log_id: RowId, patch: Dict[str, Any]) -> TreeCareLog:
        data = {k: v for k, v in patch.items() if k in EDITABLE_FIELDS and v is not None}
        if not data:
            raise ValidationError("No valid fields to update")
        rows = await self.db.update(DatabaseTables.TREE_CARE_LOGS, data, {"id": log_id})
        if not rows:
            raise NotFoundError(f"Care log {log_id} not found")
        return TreeCareLog(**rows[0])
