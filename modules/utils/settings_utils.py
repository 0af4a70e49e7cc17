"""Layered settings resolution for logmetrics.

Alert settings cascade from hard-coded defaults, through global defaults, to
entry-level overrides. Layers are merged left to right; a None value in a
later layer never replaces a value from an earlier one, so each field falls
back independently.
"""

from typing import Any, Dict, Mapping, Optional


def merge_layers(*layers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge settings layers ordered from lowest to highest precedence.

    Args:
        *layers: Mappings (or None) ordered lowest precedence first

    Returns:
        dict: Merged settings

    Examples:
        >>> merge_layers({"duration": "60s", "threshold": 1}, {"threshold": 10, "duration": None})
        {'duration': '60s', 'threshold': 10}
    """
    merged: Dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            if value is not None:
                merged[key] = value
    return merged


def first_set(*values: Any) -> Any:
    """Return the first value that is not None or empty, highest precedence first."""
    for value in values:
        if value is not None and value != "":
            return value
    return None
