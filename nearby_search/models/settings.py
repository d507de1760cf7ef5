"""Search settings and the configuration form model.

``SearchSettings`` is the immutable snapshot an action reads once at the
start of every search. ``SettingsForm`` is the state behind the
configuration dialog: it starts from the current settings, validates
the user's edits, and produces new settings on confirmation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nearby_search.core.constants import DEFAULT_BUFFER_DISTANCE
from nearby_search.models.buffer import SUPPORTED_UNITS, LinearUnit
from nearby_search.models.validation import ModelValidationError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from nearby_search.host.data_source import DataSource

logger = logging.getLogger("nearby_search.models.settings")


@dataclass(frozen=True, slots=True)
class SearchSettings:
    """What to search and how far.

    Attributes:
        target_data_source: Data source searched for nearby features.
        buffer_distance: Buffer distance; searches are disabled unless > 0.
        buffer_unit: Unit of ``buffer_distance``.
    """

    target_data_source: DataSource | None = None
    buffer_distance: int = DEFAULT_BUFFER_DISTANCE
    buffer_unit: LinearUnit = LinearUnit.KILOMETER

    @property
    def is_ready(self) -> bool:
        """Whether these settings allow a search to run."""
        return self.buffer_distance > 0 and self.target_data_source is not None


class SettingsForm:
    """Editable state of the configuration dialog.

    Initial values:
        - target: the configured target, else the first selectable
          data source offered.
        - distance: the configured distance if > 0, else 1.
        - unit: the configured unit.

    Distance edits that are not a positive integer keep the last valid
    distance and set ``has_error`` until a valid value is entered;
    ``confirm`` is only allowed while there is no error.
    """

    def __init__(
        self,
        settings: SearchSettings,
        data_sources: Sequence[DataSource] = (),
    ) -> None:
        self.data_sources = list(data_sources)
        self.units: tuple[LinearUnit, ...] = SUPPORTED_UNITS
        self.target_data_source = settings.target_data_source or next(
            (ds for ds in self.data_sources if ds.is_selectable), None
        )
        self.distance = (
            settings.buffer_distance if settings.buffer_distance > 0 else DEFAULT_BUFFER_DISTANCE
        )
        self.selected_unit = (
            settings.buffer_unit if settings.buffer_unit in self.units else self.units[0]
        )
        self.error = ""

    @property
    def has_error(self) -> bool:
        return bool(self.error)

    @property
    def can_confirm(self) -> bool:
        return not self.has_error

    def select_data_source(self, data_source: DataSource | None) -> None:
        self.target_data_source = data_source

    def select_unit(self, unit: LinearUnit | str) -> None:
        """Select a unit by member or name.

        Raises:
            ValueError: If *unit* is not one of the offered units.
        """
        resolved = unit if isinstance(unit, LinearUnit) else LinearUnit.parse(unit)
        if resolved not in self.units:
            msg = f"Unit {resolved.value!r} is not offered"
            raise ValueError(msg)
        self.selected_unit = resolved

    def set_distance(self, raw: str | int) -> bool:
        """Apply a distance edit.

        Returns:
            True if the value was accepted. On rejection the previous
            distance is kept and ``error`` describes the problem.
        """
        try:
            value = int(str(raw).strip())
        except ValueError:
            value = 0
        if value <= 0:
            self.error = "Distance is not > 0"
            logger.debug("Rejected distance | raw=%r | kept=%d", raw, self.distance)
            return False
        self.distance = value
        self.error = ""
        return True

    def confirm(self) -> SearchSettings:
        """Return the settings entered in the form.

        Raises:
            ModelValidationError: If the form still has a validation error.
        """
        if not self.can_confirm:
            raise ModelValidationError("SettingsForm", "distance", self.distance, self.error)
        return SearchSettings(
            target_data_source=self.target_data_source,
            buffer_distance=self.distance,
            buffer_unit=self.selected_unit,
        )
