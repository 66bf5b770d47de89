"""
Database table names and REST interface constants.

All table names and query conventions of the hosted database live here so
services never spell them inline.
"""


class DatabaseTables:
    """Tables exposed by the hosted database."""

    FARM_LAYOUTS = "farm_layouts"
    TREES = "trees"
    TREE_POSITIONS = "tree_positions"
    CUSTOM_NODE_TYPES = "custom_node_types"
    TREE_CARE_LOGS = "tree_care_logs"
    ORDERS = "orders"
    ORDER_ITEMS = "order_items"
    PREBOOKINGS = "vegetable_prebookings"
    VEGETABLES = "vegetables"

    REST_PREFIX = "/rest/v1"

    @classmethod
    def path(cls, table: str) -> str:
        """
        Get the REST path for a table.

        Args:
            table: Table name

        Returns:
            Path relative to the database base URL
        """
        return f"{cls.REST_PREFIX}/{table}"


class APIConstants:
    """General REST interface constants."""

    # HTTP Headers
    CONTENT_TYPE_JSON = "application/json"
    PREFER_RETURN_REPRESENTATION = "return=representation"
    PREFER_MERGE_DUPLICATES = "resolution=merge-duplicates,return=representation"

    # Status code the database uses for unique violations
    CONFLICT_STATUS = 409
