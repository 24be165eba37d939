"""
Predicate translation.

Predicates are MongoDB filter documents written with in-language field
names. They are rewritten to wire-names here and evaluated by the driver.
"""
from typing import Any, Optional

from bson import ObjectId

ID_FIELD = "id"
ID_WIRE_NAME = "_id"

LOGICAL_OPERATORS = {"$and", "$or", "$nor"}
ID_VALUE_OPERATORS = {"$eq", "$ne", "$in", "$nin"}


def to_object_id(value: Any) -> Any:
    """Convert a 24-hex string to an ObjectId, leave anything else as is."""
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


def _translate_id_value(value: Any) -> Any:
    if isinstance(value, dict):
        translated = {}
        for op, arg in value.items():
            if op in ID_VALUE_OPERATORS:
                if isinstance(arg, (list, tuple, set)):
                    arg = [to_object_id(v) for v in arg]
                else:
                    arg = to_object_id(arg)
            translated[op] = arg
        return translated
    return to_object_id(value)


def translate_key(document_type: type, key: str) -> str:
    """Rewrite a (possibly dotted) field name to its wire-name."""
    head, dot, rest = key.partition(".")
    if head == ID_FIELD:
        head = ID_WIRE_NAME
    else:
        head = document_type.__wire_names__.get(head, head)
    return f"{head}{dot}{rest}"


def translate_filter(
    document_type: type,
    predicate: Optional[dict[str, Any]] = None,
    **criteria: Any,
) -> dict[str, Any]:
    """
    Build a store filter for a document type.

    Args:
        document_type: Document class whose wire-name table is used
        predicate: Filter document using field names (may be None)
        **criteria: Extra equality conditions, ANDed with the predicate

    Returns:
        Filter document using wire-names
    """
    merged: dict[str, Any] = dict(predicate or {})
    merged.update(criteria)

    translated: dict[str, Any] = {}
    for key, value in merged.items():
        if key in LOGICAL_OPERATORS:
            translated[key] = [translate_filter(document_type, clause) for clause in value]
        elif key.startswith("$"):
            translated[key] = value
        else:
            wire_key = translate_key(document_type, key)
            if wire_key == ID_WIRE_NAME:
                value = _translate_id_value(value)
            translated[wire_key] = value
    return translated


def translate_sort(
    document_type: type,
    sort: Optional[list[tuple[str, int]]],
) -> Optional[list[tuple[str, int]]]:
    """Rewrite a sort specification to wire-names."""
    if not sort:
        return None
    return [(translate_key(document_type, key), direction) for key, direction in sort]
