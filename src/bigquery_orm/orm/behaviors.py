from datetime import datetime, timezone
from typing import Any, Callable, Literal, Optional

from bigquery_orm.orm.entity import Entity
from bigquery_orm.orm.events import BEFORE_SAVE

FORMATS = {
    # DATETIME columns
    "datetime": "%Y-%m-%d %H:%M:%S",
    # TIMESTAMP columns
    "timestamp": "%Y-%m-%dT%H:%M:%S.%fZ",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampBehavior:
    """Stamps ``created`` on new entities and ``modified`` on every save.

    Args:
        created: Field receiving the creation time; ``None`` disables it.
        modified: Field receiving the modification time; ``None`` disables it.
        format: ``"datetime"`` or ``"timestamp"`` rendering of the current time.
        clock: Returns the current time. Defaults to UTC now.
    """

    def __init__(
        self,
        created: Optional[str] = "created",
        modified: Optional[str] = "modified",
        format: Literal["datetime", "timestamp"] = "datetime",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if format not in FORMATS:
            raise ValueError(f"Unknown timestamp format {format!r}")
        self.created = created
        self.modified = modified
        self.format = format
        self.clock = clock or _utcnow

    def attach(self, table: Any) -> "TimestampBehavior":
        table.on(BEFORE_SAVE, self.before_save)
        return self

    def now(self) -> str:
        return self.clock().strftime(FORMATS[self.format])

    def before_save(self, entity: Entity, **kwargs) -> None:
        now = self.now()
        if entity.is_new() and self.created:
            entity.set(self.created, now)
        if self.modified:
            entity.set(self.modified, now)
