"""Plain one-line rendering of numeric vectors."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np


def _format_number(value) -> str:
    if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
        return str(int(value))
    return f"{float(value):g}"


def format_vector(values: Iterable, label: str = "") -> str:
    """Render ``values`` as ``label: [a b c]``; the label part is omitted when empty."""
    prefix = f"{label}: " if label else ""
    items = [_format_number(v) for v in np.ravel(np.asarray(list(values) if not isinstance(values, np.ndarray) else values))]
    if not items:
        return f"{prefix}]"
    return f"{prefix}[{' '.join(items)}]"


def print_vector(values: Iterable, label: str = "") -> None:
    """Print a vector to standard output in the form of :func:`format_vector`."""
    print(format_vector(values, label))