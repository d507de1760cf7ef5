"""Configuration dialog interface consumed by the search action."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from nearby_search.models.settings import SettingsForm


class ConfigurationDialog(Protocol):
    """A modal dialog editing a ``SettingsForm``.

    ``show`` suspends until the user confirms (``True``) or cancels
    (``False``). Edits are made on the form; the caller reads them only
    after a confirmation.
    """

    async def show(self, form: SettingsForm) -> bool: ...
