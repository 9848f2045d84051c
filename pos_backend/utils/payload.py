"""Helpers for reading JSON request bodies."""
from typing import Any, List, Mapping, Tuple

from pos_backend.exceptions import ValidationError

_MISSING = object()


def pick(data: Mapping[str, Any], *keys: str, default=None):
    """
    First present key wins.

    Used to accept both the camelCase keys of the public API and the
    snake_case keys older clients still send (formaPago / forma_pago).
    """
    for key in keys:
        value = data.get(key, _MISSING)
        if value is not _MISSING:
            return value
    return default


def require_object(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValidationError('El cuerpo de la petición debe ser un objeto JSON')
    return data


def line_items(raw: Any, message: str) -> List[Tuple[Any, Any]]:
    """Turn [{id, cantidad}, ...] into [(id, cantidad), ...]."""
    if not isinstance(raw, list):
        raise ValidationError(message)
    items = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            raise ValidationError('Producto con datos inválidos')
        items.append((entry.get('id'), entry.get('cantidad')))
    return items
