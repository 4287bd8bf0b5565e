"""Label and identity-key normalization.

Category, format and track labels are compared after folding case,
stripping diacritics and collapsing punctuation, so ``"Dév-Ops"`` and
``"dev ops"`` are the same label. Track identity goes one step further and
ignores separators entirely (``label_key``).
"""

from __future__ import annotations

import re
import unicodedata
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_label(value: str | None) -> str:
    decomposed = unicodedata.normalize("NFD", value or "")
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return _NON_ALNUM.sub(" ", stripped.lower()).strip()


def label_key(value: str | None) -> str:
    """Identity key of a label: normalized with all separators dropped.

    ``"Dev Ops"``, ``"devops"`` and ``"  DEVOPS "`` share one key.
    """

    return normalize_label(value).replace(" ", "")


def normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


def labels_overlap(left: str, right: str) -> bool:
    """Containment match on two already-normalized labels.

    Known ambiguity: short labels match inside longer ones (``"go"`` inside
    ``"go to market"``). Kept as-is for compatibility with existing data.
    """

    if not left or not right:
        return False
    return left == right or left in right or right in left


def find_by_label[T](
    candidates: Iterable[T],
    labels: Iterable[str],
    *,
    name_of: Callable[[T], str],
) -> T | None:
    """Return the first candidate whose normalized name overlaps any of ``labels``."""

    normalized_labels = [label for label in map(normalize_label, labels) if label]
    for candidate in candidates:
        normalized_name = normalize_label(name_of(candidate))
        if any(labels_overlap(label, normalized_name) for label in normalized_labels):
            return candidate
    return None
