from typing import Any, Dict, Iterable, List, Optional


class Entity:
    """A row of a warehouse-backed table.

    Tracks which fields changed since the entity was loaded or last saved,
    the values they had before, validation errors, and whether the row exists
    on the warehouse yet.

    Args:
        data: Initial field values.
        new: Whether the row has not been persisted yet.
        source: Name of the table the entity belongs to.
        mark_clean: Start clean instead of marking every field dirty.
    """

    def __init__(
        self,
        data: Optional[Dict[str, Any]] = None,
        *,
        new: bool = True,
        source: Optional[str] = None,
        mark_clean: bool = False,
    ):
        self._fields: Dict[str, Any] = {}
        self._original: Dict[str, Any] = {}
        self._dirty: Dict[str, bool] = {}
        self._errors: Dict[str, List[str]] = {}
        self._new = new
        self._source = source
        for field, value in (data or {}).items():
            self.set(field, value)
        if mark_clean:
            self.clean()

    def __repr__(self):
        state = "new" if self._new else "persisted"
        return f"<{type(self).__name__} {self._source or ''} {state} {self._fields!r}>"

    def get(self, field: str, default: Any = None) -> Any:
        return self._fields.get(field, default)

    def set(self, field: str, value: Any) -> "Entity":
        """Sets ``field``; only an actual change marks it dirty."""
        if field in self._fields and self._fields[field] == value:
            return self
        if field not in self._original and field in self._fields:
            self._original[field] = self._fields[field]
        self._fields[field] = value
        self._dirty[field] = True
        return self

    def __getitem__(self, field: str) -> Any:
        return self._fields[field]

    def __setitem__(self, field: str, value: Any) -> None:
        self.set(field, value)

    def __contains__(self, field: str) -> bool:
        return field in self._fields

    def is_new(self) -> bool:
        return self._new

    def set_new(self, new: bool) -> None:
        self._new = new

    def is_dirty(self, field: Optional[str] = None) -> bool:
        if field is None:
            return bool(self._dirty)
        return self._dirty.get(field, False)

    def dirty_fields(self) -> List[str]:
        return list(self._dirty)

    def get_original(self, field: str) -> Any:
        """Returns the value ``field`` had before it was last changed."""
        if field in self._original:
            return self._original[field]
        return self._fields.get(field)

    def clean(self) -> None:
        """Forgets changes and errors; current values become the originals."""
        self._dirty = {}
        self._original = {}
        self._errors = {}

    def snapshot(self) -> Dict[str, Any]:
        """Captures the full entity state for a later ``restore``."""
        return {
            "fields": dict(self._fields),
            "original": dict(self._original),
            "dirty": dict(self._dirty),
            "errors": {field: list(messages) for field, messages in self._errors.items()},
            "new": self._new,
            "source": self._source,
        }

    def restore(self, state: Dict[str, Any]) -> None:
        self._fields = dict(state["fields"])
        self._original = dict(state["original"])
        self._dirty = dict(state["dirty"])
        self._errors = {field: list(messages) for field, messages in state["errors"].items()}
        self._new = state["new"]
        self._source = state["source"]

    def set_errors(self, errors: Dict[str, Iterable[str]]) -> None:
        for field, messages in errors.items():
            self._errors.setdefault(field, []).extend(messages)

    def get_errors(self) -> Dict[str, List[str]]:
        return {field: list(messages) for field, messages in self._errors.items()}

    def has_errors(self, include_associated: bool = True) -> bool:
        if any(self._errors.values()):
            return True
        if not include_associated:
            return False
        return any(
            value.has_errors(include_associated)
            for value in self._fields.values()
            if isinstance(value, Entity)
        )

    def get_source(self) -> Optional[str]:
        return self._source

    def set_source(self, source: str) -> None:
        self._source = source

    def to_dict(self) -> Dict[str, Any]:
        return {
            field: value.to_dict() if isinstance(value, Entity) else value
            for field, value in self._fields.items()
        }
