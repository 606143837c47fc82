"""
Utility functions for the campaign engine.
"""

from copy import deepcopy
from dataclasses import fields
from typing import Any, TypeVar

from kdm_tracker.engine import MAX_PARTY_SIZE, MIN_PARTY_SIZE
from kdm_tracker.engine.errors import (
    BoundsError,
    EntityNotFoundError,
    IllegalTransitionError,
    PartySizeError,
    ScoutError,
)
from kdm_tracker.engine.state import Campaign, Settlement, Survivor

T = TypeVar("T")


def _next_id(items: list[Any]) -> int:
    return max((item.id for item in items), default=0) + 1


def next_hunt_id(campaign: Campaign) -> int:
    return _next_id(campaign.hunts)


def next_showdown_id(campaign: Campaign) -> int:
    return _next_id(campaign.showdowns)


def upsert_by_id(items: list[T], entity: T) -> list[T]:
    """
    Return a new list with `entity` replacing the item that has the same id (order kept),
    or appended when no item matches.
    """
    out = list(items)
    for i, item in enumerate(out):
        if item.id == entity.id:
            out[i] = entity
            return out
    out.append(entity)
    return out


def new_campaign(version: str | None = None) -> Campaign:
    """An empty campaign with nothing selected."""
    return Campaign(version=version)


def apply_changes(entity: T, changes: dict[str, Any], allowed: tuple[str, ...]) -> T:
    """
    Return a copy of the dataclass `entity` with `changes` applied.
    Only fields named in `allowed` may change; anything else raises BoundsError.
    """
    known = {f.name for f in fields(entity)}
    for name in changes:
        if name not in allowed or name not in known:
            raise BoundsError(f"Field '{name}' cannot be changed here.", field=name)
    updated = deepcopy(entity)
    for name, value in changes.items():
        setattr(updated, name, value)
    return updated


# ===== Party checks shared by hunts and showdowns =====

def require_settlement(campaign: Campaign, settlement_id: int) -> Settlement:
    settlement = campaign.get_settlement(settlement_id)
    if settlement is None:
        raise EntityNotFoundError(f"Settlement {settlement_id} not found.", field="settlement_id")
    return settlement


def require_idle_settlement(campaign: Campaign, settlement_id: int) -> None:
    """A settlement runs at most one active hunt or showdown at a time."""
    if any(h.settlement_id == settlement_id and h.is_active for h in campaign.hunts):
        raise IllegalTransitionError(
            "The settlement already has an active hunt.", field="settlement_id"
        )
    if any(s.settlement_id == settlement_id and s.is_active for s in campaign.showdowns):
        raise IllegalTransitionError(
            "The settlement already has an active showdown.", field="settlement_id"
        )


def _departing_survivor(
    campaign: Campaign,
    settlement: Settlement,
    survivor_id: int,
    activity: str,
) -> Survivor:
    survivor = campaign.get_survivor(survivor_id)
    if survivor is None:
        raise EntityNotFoundError(f"Survivor {survivor_id} not found.", field="survivors")
    if survivor.settlement_id != settlement.id:
        raise EntityNotFoundError(
            f"Survivor {survivor_id} does not belong to {settlement.name}.", field="survivors"
        )
    if survivor.dead or survivor.retired:
        raise IllegalTransitionError(
            f"{survivor.name or f'Survivor {survivor_id}'} can no longer depart.", field="survivors"
        )
    if activity == "hunt" and survivor.skip_next_hunt:
        raise IllegalTransitionError(
            f"{survivor.name or f'Survivor {survivor_id}'} must sit out the next hunt.", field="survivors"
        )
    return survivor


def check_party(
    campaign: Campaign,
    settlement: Settlement,
    survivor_ids: list[int],
    scout_id: int | None,
    activity: str,
) -> None:
    """
    Raise the first problem with a departing party, or return None.
    `activity` is "hunt" or "showdown" and only shapes the messages.
    """
    if len(survivor_ids) < MIN_PARTY_SIZE:
        raise PartySizeError(
            f"At least one survivor must be selected for the {activity}.", field="survivors"
        )
    if len(survivor_ids) > MAX_PARTY_SIZE:
        raise PartySizeError(
            f"No more than four survivors can embark on a {activity}.", field="survivors"
        )
    if len(set(survivor_ids)) != len(survivor_ids):
        raise BoundsError(f"A survivor cannot join the same {activity} twice.", field="survivors")
    for survivor_id in survivor_ids:
        _departing_survivor(campaign, settlement, survivor_id, activity)

    if scout_id is None:
        return
    if not settlement.uses_scouts:
        raise ScoutError(f"{settlement.name} does not employ scouts.", field="scout")
    if scout_id in survivor_ids:
        raise ScoutError(
            f"The selected scout cannot also be one of the survivors selected for the {activity}.",
            field="scout",
        )
    _departing_survivor(campaign, settlement, scout_id, activity)


def print_campaign(campaign: Campaign, verbose: bool = False):
    """
    Pretty-print the campaign.

    Args:
        campaign: Campaign to print
        verbose: If True, list every survivor under its settlement
    """
    print(f"\n{'='*60}")
    print(
        f"Settlements: {len(campaign.settlements)} | Survivors: {len(campaign.survivors)} | "
        f"Hunts: {len(campaign.hunts)} | Showdowns: {len(campaign.showdowns)}")
    print(f"{'='*60}")

    for settlement in campaign.settlements:
        marker = "*" if settlement.id == campaign.selected_settlement_id else " "
        print(f"\n{marker} {settlement.name} (#{settlement.id}, {settlement.survivor_type})")
        members = [s for s in campaign.survivors if s.settlement_id == settlement.id]
        if verbose:
            for survivor in members:
                status = "dead" if survivor.dead else "retired" if survivor.retired else "alive"
                print(f"  - {survivor.name or '(unnamed)'} #{survivor.id}: {status}, "
                      f"hunt xp={survivor.hunt_xp}, survival={survivor.survival}")
        else:
            alive = sum(1 for s in members if not s.dead)
            print(f"  - {alive} living / {len(members)} survivors")

    for hunt in campaign.hunts:
        print(f"\nHunt #{hunt.id} vs {hunt.quarry_name} L{hunt.quarry_level} [{hunt.status}] "
              f"survivors@{hunt.survivor_position} quarry@{hunt.quarry_position}"
              + (f" -> {hunt.outcome}" if hunt.outcome else ""))
    for showdown in campaign.showdowns:
        print(f"\nShowdown #{showdown.id} vs {showdown.monster_name} L{showdown.monster_level} "
              f"[{showdown.status}] round {showdown.turn.round}, {showdown.turn.current_turn} turn"
              + (f" -> {showdown.outcome}" if showdown.outcome else ""))
    print()
