"""Base SQLAlchemy declarative base for all models"""

from sqlalchemy import JSON, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base


class PortableJSONB(TypeDecorator):
    """JSON type that works with both PostgreSQL (JSONB) and SQLite (JSON).

    Uses JSONB on PostgreSQL for efficient indexing and querying,
    falls back to JSON on SQLite for testing compatibility.
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        else:
            return dialect.type_descriptor(JSON())


Base = declarative_base()


def check_transition(model_name: str, allowed: dict, current, new_value, enum_cls):
    """Validate a status change against an allowed-transitions table.

    Args:
        model_name: Model name for the error message
        allowed: Mapping current status -> list of reachable statuses
        current: Current status value (None for new records)
        new_value: Requested status (enum member or string)
        enum_cls: Status enum class

    Returns:
        str: The validated status value

    Raises:
        InvalidStateTransition: If the value is unknown or the change is not allowed
    """
    from ..errors import InvalidStateTransition

    try:
        new_status = enum_cls(new_value)
    except ValueError:
        raise InvalidStateTransition(f"Invalid {model_name} status value: {new_value}")

    current_status = enum_cls(current) if current is not None else None
    if current_status == new_status:
        return new_status.value

    reachable = allowed.get(current_status, [])
    if new_status not in reachable:
        raise InvalidStateTransition(
            f"Invalid {model_name} status transition: "
            f"{current_status.value if current_status else None} -> {new_status.value}"
        )
    return new_status.value
