"""Selection reconciliation.

Applies a set of matched identifiers to the features rendered for a
data source: every selected feature is unselected first, then each
feature whose identifier is in the match set is selected. The result
depends only on the inputs, so reconciling twice is the same as once.

Each feature is touched once and independently; readers may observe a
feature between its clear and its set, which is harmless because no
ordering across features is required.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Set

    from nearby_search.models.feature import Feature

logger = logging.getLogger("nearby_search.orchestrators.reconcile")


def reconcile_selection(
    rendered_features: Iterable[Feature],
    matched_ids: Set[int],
    id_extractor: Callable[[Feature], int | None],
) -> int:
    """Make the selection of *rendered_features* equal *matched_ids*.

    Args:
        rendered_features: Features currently rendered for the target.
        matched_ids: Identifiers to select.
        id_extractor: Reads a feature's identifier. ``None``, ``KeyError``,
            ``TypeError`` and ``ValueError`` all mean the identifier could
            not be extracted; the feature is then left unselected.

    Returns:
        Number of features selected after reconciliation.
    """
    selected = 0
    cleared = 0
    for feature in rendered_features:
        if feature.selected:
            feature.unselect()
            cleared += 1
        try:
            feature_id = id_extractor(feature)
        except (KeyError, TypeError, ValueError):
            feature_id = None
        if feature_id is not None and feature_id in matched_ids:
            feature.select()
            selected += 1

    logger.debug(
        "Selection reconciled | matched=%d | selected=%d | cleared=%d",
        len(matched_ids),
        selected,
        cleared,
    )
    return selected
