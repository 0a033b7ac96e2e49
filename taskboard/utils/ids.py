"""Document identifier generation and validation (BSON ObjectId)."""

from bson import ObjectId


def generate_object_id() -> str:
    """Generate a new document identifier.

    Returns:
        A 24-character lowercase hex ObjectId string.
    """
    return str(ObjectId())


def is_object_id(value: object) -> bool:
    """Return True if `value` is a 24-character hex ObjectId string."""
    return isinstance(value, str) and ObjectId.is_valid(value)


__all__ = ["generate_object_id", "is_object_id"]
