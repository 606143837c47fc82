"""
Query functions for collaborators (board, forms, HTTP layer).
All queries are read-only and never modify the campaign.
"""

from typing import Any

from kdm_tracker.engine.actions import Action
from kdm_tracker.engine.board import describe_board, token_placement
from kdm_tracker.engine.definitions import MonsterDefinition
from kdm_tracker.engine.errors import CampaignError
from kdm_tracker.engine.reducer import (
    CAMPAIGN_ACTIONS,
    HUNT_ALLOWED_ACTIONS,
    SHOWDOWN_ALLOWED_ACTIONS,
    apply_action,
)
from kdm_tracker.engine.state import (
    Campaign,
    Hunt,
    Settlement,
    SettlementQuarry,
    Showdown,
    Survivor,
)
from kdm_tracker.engine.validation import ValidationResult


# ===== Selection =====

def normalize_selection(campaign: Campaign) -> Campaign:
    """
    Return a copy whose selected ids all point at existing entities.
    Dangling selections are treated as absent.
    """
    out = campaign.copy()
    if out.get_settlement(out.selected_settlement_id) is None:
        out.selected_settlement_id = None
    if out.get_survivor(out.selected_survivor_id) is None:
        out.selected_survivor_id = None
    if out.get_hunt(out.selected_hunt_id) is None:
        out.selected_hunt_id = None
    if out.get_showdown(out.selected_showdown_id) is None:
        out.selected_showdown_id = None
    return out


def get_selected_settlement(campaign: Campaign) -> Settlement | None:
    return campaign.get_settlement(campaign.selected_settlement_id)


def get_selected_survivor(campaign: Campaign) -> Survivor | None:
    return campaign.get_survivor(campaign.selected_survivor_id)


def get_selected_hunt(campaign: Campaign) -> Hunt | None:
    return campaign.get_hunt(campaign.selected_hunt_id)


def get_selected_showdown(campaign: Campaign) -> Showdown | None:
    return campaign.get_showdown(campaign.selected_showdown_id)


# ===== Settlement / party =====

def get_settlement_survivors(campaign: Campaign, settlement_id: int) -> list[Survivor]:
    return [s for s in campaign.survivors if s.settlement_id == settlement_id]


def get_available_survivors(
    campaign: Campaign,
    settlement_id: int,
    activity: str = "hunt",
) -> list[Survivor]:
    """Survivors of the settlement who may depart. Hunts also skip survivors sitting one out."""
    out = []
    for survivor in get_settlement_survivors(campaign, settlement_id):
        if survivor.dead or survivor.retired:
            continue
        if activity == "hunt" and survivor.skip_next_hunt:
            continue
        out.append(survivor)
    return out


def get_available_scouts(
    campaign: Campaign,
    settlement_id: int,
    survivor_ids: list[int],
    activity: str = "hunt",
) -> list[Survivor]:
    """Candidates for scout: available survivors not already in the party. Empty if the settlement has no scouts."""
    settlement = campaign.get_settlement(settlement_id)
    if settlement is None or not settlement.uses_scouts:
        return []
    return [
        s for s in get_available_survivors(campaign, settlement_id, activity)
        if s.id not in survivor_ids
    ]


def get_available_quarries(settlement: Settlement) -> list[SettlementQuarry]:
    return [q for q in settlement.quarries if q.unlocked]


def get_active_hunt(campaign: Campaign, settlement_id: int) -> Hunt | None:
    return next(
        (h for h in campaign.hunts if h.settlement_id == settlement_id and h.is_active), None
    )


def get_active_showdown(campaign: Campaign, settlement_id: int) -> Showdown | None:
    return next(
        (s for s in campaign.showdowns if s.settlement_id == settlement_id and s.is_active), None
    )


# ===== Actions =====

def get_available_action_types(
    campaign: Campaign,
    hunt_id: int | None = None,
    showdown_id: int | None = None,
) -> list[str]:
    """
    Action types the given hunt or showdown accepts right now.
    With neither id, the actions that start a new activity.
    """
    if hunt_id is not None:
        hunt = campaign.get_hunt(hunt_id)
        if hunt is None:
            return []
        return list(HUNT_ALLOWED_ACTIONS.get(hunt.status, []))
    if showdown_id is not None:
        showdown = campaign.get_showdown(showdown_id)
        if showdown is None or not showdown.is_active:
            return []
        return list(SHOWDOWN_ALLOWED_ACTIONS.get(showdown.turn.current_turn, []))
    return list(CAMPAIGN_ACTIONS)


def validate_action(
    campaign: Campaign,
    action: Action,
    monster_defs: dict[str, MonsterDefinition] | None = None,
) -> ValidationResult:
    """
    Validate an action without applying it.
    Returns ValidationResult with valid=True or valid=False with the first broken rule.
    """
    try:
        apply_action(campaign, action, monster_defs)
    except CampaignError as e:
        return ValidationResult(False, e)
    return ValidationResult(True)


# ===== Presentation helpers =====

def get_hunt_board(campaign: Campaign, hunt_id: int) -> dict[str, Any] | None:
    """Everything a board collaborator needs to draw a hunt."""
    hunt = campaign.get_hunt(hunt_id)
    if hunt is None:
        return None
    return {
        "hunt_id": hunt.id,
        "status": hunt.status,
        "spaces": describe_board(
            hunt.survivor_position, hunt.quarry_position, hunt.hunt_board, hunt.quarry_name,
        ),
        "placement": token_placement(hunt.survivor_position, hunt.quarry_position),
    }


def get_showdown_summary(campaign: Campaign, showdown_id: int) -> dict[str, Any] | None:
    """Whose turn it is, the round, and which survivors still have something to do."""
    showdown = campaign.get_showdown(showdown_id)
    if showdown is None:
        return None
    states = {s.survivor_id: s for s in showdown.turn.survivor_states}
    pending = [
        sid for sid in showdown.survivors
        if sid not in states or not states[sid].consumed
    ]
    return {
        "showdown_id": showdown.id,
        "status": showdown.status,
        "round": showdown.turn.round,
        "current_turn": showdown.turn.current_turn,
        "ai_card_drawn": showdown.turn.monster_state.ai_card_drawn,
        "pending_survivors": pending,
        "available_actions": get_available_action_types(campaign, showdown_id=showdown.id),
    }
