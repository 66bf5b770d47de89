"""
Application service: tree type catalog.
"""
from typing import List, Optional
import logging

from farm_market.domain.errors import NotFoundError, ValidationError
from farm_market.domain.models import RowId, TreeType
from farm_market.infrastructure.api_constants import DatabaseTables
from farm_market.infrastructure.database_client import DatabaseClient
from farm_market.services.domain.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

_CATALOG_KEY = "tree_types"


class TreeTypeService:
    """Reads and writes tree types, serving the full list from a cache."""

    def __init__(self, db: DatabaseClient, cache: TTLCache):
        self.db = db
        self.cache = cache

    async def list_tree_types(self, refresh: bool = False) -> List[TreeType]:
        if not refresh:
            cached = self.cache.get(_CATALOG_KEY)
            if cached is not None:
                return cached

        rows = await self.db.select(DatabaseTables.TREES, order="name.asc")
        tree_types = [TreeType(**row) for row in rows]
        self.cache.set(_CATALOG_KEY, tree_types)
        logger.debug(f"Loaded {len(tree_types)} tree types into cache")
        return tree_types

    async def get_tree_type(self, tree_id: RowId) -> TreeType:
        row = await self.db.select_one(DatabaseTables.TREES, {"id": tree_id})
        if row is None:
            raise NotFoundError(f"Tree {tree_id} not found")
        return TreeType(**row)

    async def create_tree_type(
        self,
        code: str,
        name: str,
        category: Optional[str] = None,
        season: Optional[str] = None,
        years_to_fruit: Optional[int] = None,
        mature_height: Optional[str] = None,
        description: Optional[str] = None,
    ) -> TreeType:
        if not code or not name:
            raise ValidationError("Tree code and name are required")

        rows = await self.db.insert(
            DatabaseTables.TREES,
            {
                "code": code,
                "name": name,
                "category": category,
                "season": season,
                "years_to_fruit": years_to_fruit,
                "mature_height": mature_height,
                "description": description,
            },
        )
        self.cache.invalidate(_CATALOG_KEY)
        tree_type = TreeType(**rows[0])
        logger.info(f"Created tree type {tree_type.code} ({tree_type.id})")
        return tree_type
