"""
Campaign storage.
A store owns the single persisted campaign document. `read` hands out copies; `commit`
merges a patch over the current campaign and persists the result atomically.
"""

import json
import os
import tempfile
from copy import deepcopy
from pathlib import Path
from typing import Any

from kdm_tracker.engine.errors import CampaignError, PersistenceError
from kdm_tracker.engine.queries import normalize_selection
from kdm_tracker.engine.state import CAMPAIGN_KEYS, Campaign
from kdm_tracker.engine.utils import new_campaign

CAMPAIGN_ATTRIBUTES = tuple(CAMPAIGN_KEYS.values())


def merge_patch(campaign: Campaign, patch: dict[str, Any]) -> Campaign:
    """
    Shallow merge: each key in `patch` (a Campaign attribute name) replaces that
    top-level field entirely. Unknown keys raise CampaignError.
    """
    merged = campaign.copy()
    for attr, value in patch.items():
        if attr not in CAMPAIGN_ATTRIBUTES:
            raise CampaignError(f"Unknown campaign field: {attr}", field=attr)
        setattr(merged, attr, deepcopy(value))
    return merged


class CampaignStore:
    """
    Base store. Subclasses provide `_load_raw` / `_save_raw` over a JSON text document.
    """

    def __init__(self, version: str | None = None):
        self.version = version

    def _load_raw(self) -> str | None:
        raise NotImplementedError

    def _save_raw(self, text: str) -> None:
        raise NotImplementedError

    def read(self) -> Campaign:
        """
        Current campaign as a copy. Nothing persisted (or unreadable text) gives an
        empty campaign. Dangling selections come back as None.
        """
        raw = self._load_raw()
        if not raw:
            return new_campaign(self.version)
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            return new_campaign(self.version)
        if not isinstance(data, dict):
            return new_campaign(self.version)
        return normalize_selection(Campaign.from_dict(data))

    def commit(self, patch: dict[str, Any] | Campaign) -> Campaign:
        """
        Merge `patch` over the current campaign and persist it. A whole Campaign counts as
        a patch of every field.
        Returns the merged campaign. On failure raises PersistenceError and the stored
        campaign is unchanged. Committing what is already stored writes nothing.
        """
        if isinstance(patch, Campaign):
            patch = {attr: getattr(patch, attr) for attr in CAMPAIGN_ATTRIBUTES}
        merged = merge_patch(self.read(), patch)
        text = merged.to_json()
        if text == self._load_raw():
            return merged
        try:
            self._save_raw(text)
        except OSError as e:
            raise PersistenceError(f"Could not save the campaign: {e}") from e
        return merged.copy()

    def replace(self, campaign: Campaign) -> Campaign:
        """Persist `campaign` wholesale (import)."""
        return self.commit(campaign)


class InMemoryCampaignStore(CampaignStore):
    """Keeps the document in memory. Used by tests and the demo."""

    def __init__(self, campaign: Campaign | None = None, version: str | None = None):
        super().__init__(version)
        self._text: str | None = campaign.to_json() if campaign is not None else None
        self.writes = 0

    def _load_raw(self) -> str | None:
        return self._text

    def _save_raw(self, text: str) -> None:
        self._text = text
        self.writes += 1


class JsonFileCampaignStore(CampaignStore):
    """
    Keeps the document in a local JSON file.
    Writes go to a temporary file in the same directory which then replaces the original,
    so a failed write never leaves a half-written campaign behind.
    """

    def __init__(self, path: Path | str, version: str | None = None):
        super().__init__(version)
        self.path = Path(path)

    def _load_raw(self) -> str | None:
        if not self.path.exists():
            return None
        try:
            return self.path.read_text()
        except OSError as e:
            raise PersistenceError(f"Could not read {self.path}: {e}") from e

    def _save_raw(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(text)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
