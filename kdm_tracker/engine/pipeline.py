"""
Save/commit pipeline.
Every change to the campaign goes read -> merge -> validate -> persist -> notify and
returns a CommitResult. A failed step leaves the store untouched and the result carries
the first broken rule as its message.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from kdm_tracker.engine.actions import Action
from kdm_tracker.engine.definitions import MonsterDefinition
from kdm_tracker.engine.errors import CampaignError, PersistenceError
from kdm_tracker.engine.events import (
    CAMPAIGN_SAVED_MESSAGE,
    CampaignEvent,
    campaign_imported,
    campaign_saved,
)
from kdm_tracker.engine.hunt import SpaceRule
from kdm_tracker.engine.queries import normalize_selection
from kdm_tracker.engine.reducer import apply_action
from kdm_tracker.engine.state import CAMPAIGN_KEYS, Campaign, patch_from_dict
from kdm_tracker.engine.store import CAMPAIGN_ATTRIBUTES, CampaignStore, merge_patch
from kdm_tracker.engine.utils import new_campaign
from kdm_tracker.engine.validation import validate_campaign, validate_document


@dataclass
class CommitResult:
    """Outcome of one pipeline run. `message` is None when toasts are disabled."""
    ok: bool
    message: str | None
    campaign: Campaign
    error: CampaignError | None = None
    events: list[CampaignEvent] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "message": self.message,
            "error": self.error.to_dict() if self.error else None,
            "events": [e.to_dict() for e in self.events],
            "campaign": self.campaign.to_dict(),
        }


Subscriber = Callable[[CommitResult], None]


def normalize_patch(patch: dict[str, Any]) -> dict[str, Any]:
    """
    Accept a patch keyed by Campaign attribute names (typed values) or by persisted
    camelCase keys (raw JSON values), or a mix. Returns attribute-keyed typed values.
    Raw values are type-checked before parsing; a mistyped one raises BoundsError.
    """
    typed = {}
    persisted = {}
    for key, value in patch.items():
        raw = isinstance(value, list) and any(isinstance(x, dict) for x in value)
        if key in CAMPAIGN_KEYS and raw:
            persisted[key] = value
        elif key in CAMPAIGN_ATTRIBUTES:
            typed[key] = value
        elif key in CAMPAIGN_KEYS:
            persisted[key] = value
        else:
            raise CampaignError(f"Unknown campaign field: {key}", field=key)
    if persisted:
        result = validate_document(persisted)
        if not result.valid:
            raise result.error
    typed.update(patch_from_dict(persisted))
    return typed


class CommitPipeline:
    """
    The only way collaborators change the campaign.

    Args:
        store: Where the campaign lives
        monster_defs: Monster reference data for seeding hunts and showdowns
        space_rules: Hunt board space rules (None uses the default rules)
    """

    def __init__(
        self,
        store: CampaignStore,
        monster_defs: dict[str, MonsterDefinition] | None = None,
        space_rules: dict[int, SpaceRule] | None = None,
    ):
        self.store = store
        self.monster_defs = monster_defs or {}
        self.space_rules = space_rules
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call `callback` after every pipeline run. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def read(self) -> Campaign:
        return self.store.read()

    def save(self, patch: dict[str, Any], success_message: str | None = None) -> CommitResult:
        """Merge `patch` over the campaign, validate and persist it."""
        current, error = self._read_current()
        if error:
            return self._finish(self._failure(error, current))
        try:
            typed = normalize_patch(patch)
        except CampaignError as e:
            return self._finish(self._failure(e, current))
        events = [campaign_saved(sorted(typed), success_message)]
        return self._finish(self._commit(current, typed, events, success_message))

    def dispatch(self, action: Action) -> CommitResult:
        """Apply a hunt or showdown action and persist what changed."""
        current, error = self._read_current()
        if error:
            return self._finish(self._failure(error, current))
        try:
            updated, events = apply_action(current, action, self.monster_defs, self.space_rules)
        except CampaignError as e:
            return self._finish(self._failure(e, current))
        patch = {
            attr: getattr(updated, attr)
            for attr in CAMPAIGN_ATTRIBUTES
            if getattr(updated, attr) != getattr(current, attr)
        }
        message = " ".join(e.message for e in events if e.message) or None
        return self._finish(self._commit(current, patch, events, message))

    def export_campaign(self, path: Path | str | None = None) -> str:
        """The persisted campaign as pretty-printed JSON; also written to `path` when given."""
        text = self.store.read().to_json(indent=2)
        if path is not None:
            Path(path).write_text(text)
        return text

    def import_campaign(self, data: str | dict[str, Any]) -> CommitResult:
        """
        Replace the whole campaign with an exported document.
        Every entity is validated first; an invalid document changes nothing.
        """
        current, error = self._read_current()
        if error:
            return self._finish(self._failure(error, current))
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as e:
                return self._finish(self._failure(
                    PersistenceError(f"The campaign file could not be read: {e.msg}"), current))
        if not isinstance(data, dict):
            return self._finish(self._failure(
                PersistenceError("The campaign file must contain a JSON object."), current))
        shape = validate_document(data)
        if not shape.valid:
            return self._finish(self._failure(shape.error, current))
        incoming = normalize_selection(Campaign.from_dict(data))
        if incoming.version is None:
            incoming.version = current.version
        events = [campaign_imported(
            len(incoming.settlements),
            len(incoming.survivors),
            len(incoming.hunts),
            len(incoming.showdowns),
        )]
        patch = {attr: getattr(incoming, attr) for attr in CAMPAIGN_ATTRIBUTES}
        return self._finish(self._commit(current, patch, events, events[0].message))

    # ===== Internals =====

    def _read_current(self) -> tuple[Campaign, PersistenceError | None]:
        # An unreadable store still yields a campaign for the failure result
        try:
            return self.store.read(), None
        except PersistenceError as e:
            return new_campaign(self.store.version), e

    def _commit(
        self,
        current: Campaign,
        patch: dict[str, Any],
        events: list[CampaignEvent],
        success_message: str | None,
    ) -> CommitResult:
        try:
            candidate = merge_patch(current, patch)
        except CampaignError as e:
            return self._failure(e, current)
        result = validate_campaign(candidate)
        if not result.valid:
            return self._failure(result.error, current)
        try:
            committed = self.store.commit(patch)
        except PersistenceError as e:
            return self._failure(e, current)
        message = None if committed.disable_toasts else (success_message or CAMPAIGN_SAVED_MESSAGE)
        return CommitResult(True, message, committed, events=events)

    def _failure(self, error: CampaignError, current: Campaign) -> CommitResult:
        # Failures keep their message even when toasts are disabled
        return CommitResult(False, error.message, current, error=error)

    def _finish(self, result: CommitResult) -> CommitResult:
        for callback in list(self._subscribers):
            callback(result)
        return result
