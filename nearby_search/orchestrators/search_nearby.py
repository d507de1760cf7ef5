"""Search Nearby feature action.

Coordinates one search run: buffer the trigger feature through the
geometry service, query the target data source with the buffer, and
reconcile the selection of the target's rendered features.

State machine::

    IDLE -> ELIGIBLE -> BUFFERING -> QUERYING -> RECONCILING -> IDLE

Any state falls back to ``IDLE`` on a failed precondition, a failed or
empty buffer, a superseded run, or a vanished feature layer.

Supersession:
    Each ``execute`` starts a new run and cancels the buffer request of
    the previous one, so a new trigger always wins. Besides the buffer
    client's generation check, the action compares its own run counter
    before querying and before reconciling, so a slow query of an older
    run can never overwrite the selection of a newer one.

Error policy:
    - Failed preconditions: the run never starts; nothing is reported.
    - Buffer failure: the user is notified; selection is untouched.
    - Empty buffer: silent abort; selection is untouched.
    - Failed, canceled or empty query: reconciled as "no matches",
      which clears the target's selection.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nearby_search.models.buffer import BufferSpec, BufferStatus
from nearby_search.models.feature import extract_object_id
from nearby_search.models.settings import SearchSettings, SettingsForm
from nearby_search.orchestrators.reconcile import reconcile_selection
from nearby_search.services.query_client import SpatialQueryClient
from nearby_search.utils.esri_json import is_supported_geometry

if TYPE_CHECKING:
    from nearby_search.host.data_source import DataSource
    from nearby_search.host.dialog import ConfigurationDialog
    from nearby_search.host.map_surface import MapHost, MapSurface
    from nearby_search.models.feature import Feature
    from nearby_search.services.buffer_client import GeometryBufferClient

logger = logging.getLogger("nearby_search.orchestrators.search_nearby")

BUFFER_FAILED_NOTICE = "Failed to calculate buffer, error: {error}"


class SearchState(enum.Enum):
    """Where the most recent run currently is."""

    IDLE = "idle"
    ELIGIBLE = "eligible"
    BUFFERING = "buffering"
    QUERYING = "querying"
    RECONCILING = "reconciling"


class RunStatus(enum.Enum):
    """How a run ended.

    Values:
        COMPLETED:           Selection reconciled with the query result.
        PRECONDITION_FAILED: Eligibility check failed; nothing ran.
        BUFFER_FAILED:       Buffer transport or service failure (notified).
        NO_BUFFER:           Buffer service returned nothing to search with.
        SUPERSEDED:          A newer run started before this one finished.
        LAYER_MISSING:       The target's rendered features are gone.
    """

    COMPLETED = "completed"
    PRECONDITION_FAILED = "precondition_failed"
    BUFFER_FAILED = "buffer_failed"
    NO_BUFFER = "no_buffer"
    SUPERSEDED = "superseded"
    LAYER_MISSING = "layer_missing"


@dataclass(frozen=True, slots=True)
class SearchOutcome:
    """Result of one ``execute`` call.

    Attributes:
        status: How the run ended.
        run_id: Sequence number of the run.
        matched_ids: Identifiers returned by the query (empty unless queried).
        selected_count: Features selected by reconciliation.
        message: Diagnostic text for failures.
    """

    status: RunStatus
    run_id: int
    matched_ids: frozenset[int] = frozenset()
    selected_count: int = 0
    message: str = ""


class SearchNearbyAction:
    """Select the target features lying near a trigger feature.

    Args:
        host: Map host the action runs in.
        buffer_client: Client for the remote buffer operation.
        query_client: Client for the target query; a default
            ``SpatialQueryClient`` if omitted.
        settings: Initial search settings.
    """

    display_name = "Search Nearby Features"
    can_configure = True

    def __init__(
        self,
        host: MapHost,
        buffer_client: GeometryBufferClient,
        query_client: SpatialQueryClient | None = None,
        settings: SearchSettings | None = None,
    ) -> None:
        self._host = host
        self._buffer_client = buffer_client
        self._query_client = query_client or SpatialQueryClient()
        self.settings = settings or SearchSettings()
        self.state = SearchState.IDLE
        self._run_id = 0
        # Resolved by the last passing eligibility check.
        self._map_surface: MapSurface | None = None
        self._trigger_data_source: DataSource | None = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def target_data_source(self) -> DataSource | None:
        return self.settings.target_data_source

    @property
    def buffer_distance(self) -> int:
        return self.settings.buffer_distance

    async def configure(self, dialog: ConfigurationDialog) -> bool:
        """Let the user edit the settings through *dialog*.

        Returns:
            ``False`` if the dialog was cancelled (settings untouched);
            otherwise whether the confirmed settings allow a search.
        """
        form = SettingsForm(self.settings, self._host.data_sources)
        confirmed = await dialog.show(form)
        if not confirmed or not form.can_confirm:
            logger.info("Configuration cancelled | settings unchanged")
            return False

        self.settings = form.confirm()
        logger.info(
            "Configuration updated | target=%s | distance=%d | unit=%s",
            self.settings.target_data_source.id if self.settings.target_data_source else None,
            self.settings.buffer_distance,
            self.settings.buffer_unit.value,
        )
        return self.settings.is_ready

    # ------------------------------------------------------------------
    # Eligibility
    # ------------------------------------------------------------------

    def can_execute(
        self,
        trigger_data_source: DataSource | None,
        trigger_feature: Feature | None,
    ) -> bool:
        """Whether a search may run for *trigger_feature*.

        The trigger feature needs a non-empty geometry of a type the
        geometry service accepts, and both the trigger and the target data
        source must be rendered on the same map surface. A passing check
        caches that surface and the trigger data source for ``execute``; a
        failing one clears the cache.
        """
        surface = self._resolve_shared_surface(trigger_data_source, trigger_feature)
        if surface is None:
            self._map_surface = None
            self._trigger_data_source = None
            return False

        self._map_surface = surface
        self._trigger_data_source = trigger_data_source
        return True

    def _resolve_shared_surface(
        self,
        trigger_data_source: DataSource | None,
        trigger_feature: Feature | None,
    ) -> MapSurface | None:
        settings = self.settings
        if settings.buffer_distance <= 0:
            return None
        if trigger_feature is None or not is_supported_geometry(trigger_feature.geometry):
            return None
        if settings.target_data_source is None or trigger_data_source is None:
            return None

        target_surface = self._host.find_map_surface(settings.target_data_source)
        if target_surface is None:
            return None
        trigger_surface = self._host.find_map_surface(trigger_data_source)
        if trigger_surface is None:
            return None
        if trigger_surface.id != target_surface.id:
            return None
        return trigger_surface

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(
        self,
        trigger_data_source: DataSource | None,
        trigger_feature: Feature | None,
    ) -> SearchOutcome:
        """Run a search around *trigger_feature*.

        Supersedes any run still in flight. Never raises for remote
        failures; the returned outcome says how the run ended.
        """
        self._buffer_client.cancel()
        self._run_id += 1
        run_id = self._run_id
        settings = self.settings

        try:
            return await self._run(run_id, settings, trigger_data_source, trigger_feature)
        finally:
            self._set_state(run_id, SearchState.IDLE)

    async def _run(
        self,
        run_id: int,
        settings: SearchSettings,
        trigger_data_source: DataSource | None,
        trigger_feature: Feature | None,
    ) -> SearchOutcome:
        if not self.can_execute(trigger_data_source, trigger_feature):
            logger.debug("Run skipped | run=%d | precondition failed", run_id)
            return SearchOutcome(RunStatus.PRECONDITION_FAILED, run_id)

        surface: MapSurface = self._map_surface  # type: ignore[assignment]
        target: DataSource = settings.target_data_source  # type: ignore[assignment]
        self._set_state(run_id, SearchState.ELIGIBLE)

        logger.info(
            "Run started | run=%d | trigger=%s | target=%s | surface=%s | distance=%d %s",
            run_id,
            trigger_data_source.id if trigger_data_source else None,
            target.id,
            surface.id,
            settings.buffer_distance,
            settings.buffer_unit.value,
        )

        # Step 1: buffer the trigger feature in the surface's reference system
        spec = BufferSpec(
            geometry=trigger_feature.geometry,  # type: ignore[union-attr]
            distance=settings.buffer_distance,
            unit=settings.buffer_unit,
            spatial_reference=surface.spatial_reference,
        )
        self._set_state(run_id, SearchState.BUFFERING)
        buffered = await self._buffer_client.request_buffer(spec)

        if buffered.status is BufferStatus.SUPERSEDED or run_id != self._run_id:
            return self._superseded(run_id, "buffer")
        if buffered.status is BufferStatus.FAILED:
            self._host.notify(BUFFER_FAILED_NOTICE.format(error=buffered.message))
            return SearchOutcome(RunStatus.BUFFER_FAILED, run_id, message=buffered.message)
        if buffered.status is BufferStatus.NO_RESULT:
            logger.info("Run aborted | run=%d | no buffer geometry", run_id)
            return SearchOutcome(RunStatus.NO_BUFFER, run_id, message=buffered.message)

        # Step 2: query the target with the buffer polygon
        self._set_state(run_id, SearchState.QUERYING)
        result = await self._query_client.query(
            target, buffered.polygon, surface.spatial_reference
        )
        if run_id != self._run_id:
            return self._superseded(run_id, "query")

        matched = result.matched_ids(target.object_id_field_name)

        # Step 3: reconcile the rendered selection
        current_surface = self._host.find_surface(surface.id)
        layer = current_surface.find_feature_layer(target) if current_surface else None
        if layer is None:
            logger.debug("Run aborted | run=%d | target layer no longer rendered", run_id)
            return SearchOutcome(RunStatus.LAYER_MISSING, run_id, matched_ids=matched)

        self._set_state(run_id, SearchState.RECONCILING)
        field_name = target.object_id_field_name
        selected = reconcile_selection(
            layer.graphics,
            matched,
            lambda feature: extract_object_id(feature, field_name),
        )

        logger.info(
            "Run completed | run=%d | matched=%d | selected=%d | query_error=%s",
            run_id,
            len(matched),
            selected,
            result.error or None,
        )
        return SearchOutcome(
            RunStatus.COMPLETED,
            run_id,
            matched_ids=matched,
            selected_count=selected,
            message=result.error,
        )

    def _superseded(self, run_id: int, step: str) -> SearchOutcome:
        logger.debug(
            "Run superseded | run=%d | current=%d | step=%s", run_id, self._run_id, step
        )
        return SearchOutcome(RunStatus.SUPERSEDED, run_id)

    def _set_state(self, run_id: int, state: SearchState) -> None:
        if run_id == self._run_id:
            self.state = state
