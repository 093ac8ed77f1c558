from .entity import Entity
from .events import EventManager
from .behaviors import TimestampBehavior
from .query import WarehouseQuery
from .table import BigQueryTable, SaveOptions

__all__ = [
    "Entity",
    "EventManager",
    "TimestampBehavior",
    "WarehouseQuery",
    "BigQueryTable",
    "SaveOptions",
]
