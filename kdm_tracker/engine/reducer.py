"""
Main campaign reducer.
Applies hunt and showdown actions to a campaign, enforcing which actions each activity
state allows. Returns (new_campaign, events) where events describe what happened.
The input campaign is never modified.
"""

from kdm_tracker.engine import hunt as hunt_machine
from kdm_tracker.engine import showdown as showdown_machine
from kdm_tracker.engine.actions import Action
from kdm_tracker.engine.definitions import MonsterDefinition
from kdm_tracker.engine.errors import (
    CampaignError,
    EntityNotFoundError,
    IllegalTransitionError,
    TurnOrderError,
)
from kdm_tracker.engine.events import (
    CampaignEvent,
    ai_card_drawn,
    hunt_board_changed,
    hunt_positions_updated,
    hunt_resolved,
    hunt_started,
    hunt_survivor_updated,
    monster_updated,
    round_started,
    showdown_ended,
    showdown_started,
    showdown_survivor_updated,
    survivor_acted,
    turn_changed,
)
from kdm_tracker.engine.hunt import SpaceRule
from kdm_tracker.engine.state import (
    STATUS_ACTIVE,
    STATUS_RESOLVED,
    TURN_MONSTER,
    TURN_SURVIVORS,
    Campaign,
    Hunt,
    Showdown,
)
from kdm_tracker.engine.utils import next_showdown_id, require_idle_settlement, upsert_by_id

# Actions that start a new activity and need no existing target
CAMPAIGN_ACTIONS = ["begin_hunt", "begin_showdown"]

# Hunt rules: which action types are allowed in which hunt status
HUNT_ALLOWED_ACTIONS = {
    STATUS_ACTIVE: ["move_hunt", "set_hunt_event", "update_hunt_survivor", "update_hunt_monster", "resolve_hunt"],
    STATUS_RESOLVED: ["start_showdown_from_hunt"],
}

# Showdown rules: which action types are allowed on whose turn
# Note: a resolved showdown accepts nothing
SHOWDOWN_ALLOWED_ACTIONS = {
    TURN_MONSTER: ["draw_ai_card", "next_turn", "update_showdown_survivor", "update_showdown_monster", "end_showdown"],
    TURN_SURVIVORS: ["mark_survivor_action", "next_turn", "update_showdown_survivor", "update_showdown_monster", "end_showdown"],
}

# Payload keys an action cannot be applied without
REQUIRED_PAYLOAD_KEYS = {
    "begin_hunt": ["settlement_id", "quarry_name", "quarry_level", "survivor_ids"],
    "move_hunt": ["hunt_id", "survivor_position", "quarry_position"],
    "set_hunt_event": ["position"],
    "update_hunt_survivor": ["survivor_id"],
    "resolve_hunt": ["outcome"],
    "begin_showdown": ["settlement_id", "monster_name", "monster_level", "survivor_ids"],
    "mark_survivor_action": ["survivor_id"],
    "update_showdown_survivor": ["survivor_id"],
}

HUNT_ACTIONS = sorted({a for actions in HUNT_ALLOWED_ACTIONS.values() for a in actions})
SHOWDOWN_ACTIONS = sorted({a for actions in SHOWDOWN_ALLOWED_ACTIONS.values() for a in actions})


def _target_hunt(campaign: Campaign, action: Action) -> Hunt:
    hunt_id = action.payload.get("hunt_id")
    hunt = campaign.get_hunt(hunt_id)
    if hunt is None:
        raise EntityNotFoundError(f"Hunt {hunt_id} not found.", field="hunt_id")
    return hunt


def _target_showdown(campaign: Campaign, action: Action) -> Showdown:
    showdown_id = action.payload.get("showdown_id")
    showdown = campaign.get_showdown(showdown_id)
    if showdown is None:
        raise EntityNotFoundError(f"Showdown {showdown_id} not found.", field="showdown_id")
    return showdown


def _validate_action_for_state(action: Action, campaign: Campaign) -> None:
    """
    Validate that an action is allowed for the current state of its hunt or showdown.

    Special rules for showdowns:
    - Resolved: nothing is allowed
    - Monster turn: no survivor actions
    - Survivors turn: no AI card draws
    """
    missing = [key for key in REQUIRED_PAYLOAD_KEYS.get(action.type, []) if key not in action.payload]
    if missing:
        raise CampaignError(
            f"Action '{action.type}' is missing {', '.join(missing)}.", field=missing[0]
        )

    if action.type in CAMPAIGN_ACTIONS:
        return

    if action.type in HUNT_ACTIONS:
        hunt = _target_hunt(campaign, action)
        allowed = HUNT_ALLOWED_ACTIONS.get(hunt.status, [])
        if action.type not in allowed:
            raise IllegalTransitionError(
                f"Action '{action.type}' is not allowed while the hunt is {hunt.status}. "
                f"Allowed actions: {', '.join(allowed)}"
            )
        return

    if action.type in SHOWDOWN_ACTIONS:
        showdown = _target_showdown(campaign, action)
        if not showdown.is_active:
            raise IllegalTransitionError(
                f"Showdown {showdown.id} is resolved. No further actions are allowed."
            )
        allowed = SHOWDOWN_ALLOWED_ACTIONS.get(showdown.turn.current_turn, [])
        if action.type not in allowed:
            raise TurnOrderError(
                f"Action '{action.type}' is not allowed during the {showdown.turn.current_turn} turn. "
                f"Allowed actions: {', '.join(allowed)}"
            )
        return

    raise IllegalTransitionError(f"Unknown action type: {action.type}")


def apply_action(
    campaign: Campaign,
    action: Action,
    monster_defs: dict[str, MonsterDefinition] | None = None,
    space_rules: dict[int, SpaceRule] | None = None,
) -> tuple[Campaign, list[CampaignEvent]]:
    """
    Apply a single action to the campaign, returning the new campaign and events.

    Args:
        campaign: Current campaign
        action: Action to apply
        monster_defs: Monster reference data used to seed hunts and showdowns
        space_rules: Hunt board space rules; None uses the default (Starvation on 12)

    Returns:
        Tuple of (new_campaign, events) where events describe what happened

    Raises:
        CampaignError: the first rule the action breaks
    """
    _validate_action_for_state(action, campaign)

    new_campaign = campaign.copy()
    events: list[CampaignEvent] = []
    p = action.payload

    if action.type == "begin_hunt":
        events.extend(_handle_begin_hunt(new_campaign, p, monster_defs))
    elif action.type == "move_hunt":
        events.extend(_handle_move_hunt(new_campaign, p, space_rules))
    elif action.type == "set_hunt_event":
        hunt = hunt_machine.set_board_event(
            _target_hunt(new_campaign, action), p["position"], p.get("event"), bool(p.get("cycle")))
        new_campaign.hunts = upsert_by_id(new_campaign.hunts, hunt)
        events.append(hunt_board_changed(hunt.id, p["position"], hunt.hunt_board.get(p["position"])))
    elif action.type == "update_hunt_survivor":
        hunt = hunt_machine.update_hunt_survivor_details(
            _target_hunt(new_campaign, action), p["survivor_id"], p.get("changes", {}))
        new_campaign.hunts = upsert_by_id(new_campaign.hunts, hunt)
        events.append(hunt_survivor_updated(hunt.id, p["survivor_id"], p.get("changes", {})))
    elif action.type == "update_hunt_monster":
        hunt = hunt_machine.update_hunt_monster(
            _target_hunt(new_campaign, action), p.get("monster_index", 0), p.get("changes", {}))
        new_campaign.hunts = upsert_by_id(new_campaign.hunts, hunt)
        events.append(monster_updated("hunt", hunt.id, p.get("monster_index", 0), p.get("changes", {})))
    elif action.type == "resolve_hunt":
        hunt = hunt_machine.resolve_hunt(_target_hunt(new_campaign, action), p["outcome"])
        _store_resolved_hunt(new_campaign, hunt)
        events.append(hunt_resolved(hunt.id, hunt.outcome))
    elif action.type == "start_showdown_from_hunt":
        events.extend(_handle_start_showdown_from_hunt(new_campaign, action))
    elif action.type == "begin_showdown":
        events.extend(_handle_begin_showdown(new_campaign, p, monster_defs))
    elif action.type == "draw_ai_card":
        index = p.get("monster_index", 0)
        showdown = showdown_machine.draw_ai_card(_target_showdown(new_campaign, action), index)
        new_campaign.showdowns = upsert_by_id(new_campaign.showdowns, showdown)
        monster = showdown.monsters[index] if 0 <= index < len(showdown.monsters) else None
        events.append(ai_card_drawn(
            showdown.id,
            monster.name if monster else showdown.monster_name,
            monster.ai_deck_remaining if monster else None,
        ))
    elif action.type == "mark_survivor_action":
        showdown = showdown_machine.mark_survivor_action(
            _target_showdown(new_campaign, action),
            p["survivor_id"],
            p.get("activation_used"),
            p.get("movement_used"),
        )
        new_campaign.showdowns = upsert_by_id(new_campaign.showdowns, showdown)
        state = next(s for s in showdown.turn.survivor_states if s.survivor_id == p["survivor_id"])
        events.append(survivor_acted(showdown.id, state.survivor_id, state.activation_used, state.movement_used))
    elif action.type == "next_turn":
        events.extend(_handle_next_turn(new_campaign, action))
    elif action.type == "update_showdown_survivor":
        showdown = showdown_machine.update_showdown_survivor_details(
            _target_showdown(new_campaign, action), p["survivor_id"], p.get("changes", {}))
        new_campaign.showdowns = upsert_by_id(new_campaign.showdowns, showdown)
        events.append(showdown_survivor_updated(showdown.id, p["survivor_id"], p.get("changes", {})))
    elif action.type == "update_showdown_monster":
        showdown = showdown_machine.update_monster(
            _target_showdown(new_campaign, action), p.get("monster_index", 0), p.get("changes", {}))
        new_campaign.showdowns = upsert_by_id(new_campaign.showdowns, showdown)
        events.append(monster_updated("showdown", showdown.id, p.get("monster_index", 0), p.get("changes", {})))
    elif action.type == "end_showdown":
        showdown = showdown_machine.end_showdown(
            _target_showdown(new_campaign, action), p.get("outcome", showdown_machine.OUTCOME_VICTORY))
        new_campaign.showdowns = upsert_by_id(new_campaign.showdowns, showdown)
        if new_campaign.selected_showdown_id == showdown.id:
            new_campaign.selected_showdown_id = None
        events.append(showdown_ended(showdown.id, showdown.outcome, showdown.turn.round))

    return new_campaign, events


def _store_resolved_hunt(campaign: Campaign, hunt: Hunt) -> None:
    campaign.hunts = upsert_by_id(campaign.hunts, hunt)
    if campaign.selected_hunt_id == hunt.id:
        campaign.selected_hunt_id = None


def _handle_begin_hunt(
    campaign: Campaign,
    payload: dict,
    monster_defs: dict[str, MonsterDefinition] | None,
) -> list[CampaignEvent]:
    hunt = hunt_machine.begin_hunt(
        campaign,
        payload["settlement_id"],
        payload["quarry_name"],
        payload["quarry_level"],
        payload["survivor_ids"],
        payload.get("scout_id"),
        monster_defs,
    )
    campaign.hunts = upsert_by_id(campaign.hunts, hunt)
    campaign.selected_hunt_id = hunt.id
    campaign.selected_settlement_id = hunt.settlement_id
    return [hunt_started(
        hunt.id, hunt.settlement_id, hunt.quarry_name, hunt.quarry_level, hunt.survivors, hunt.scout,
    )]


def _handle_move_hunt(
    campaign: Campaign,
    payload: dict,
    space_rules: dict[int, SpaceRule] | None,
) -> list[CampaignEvent]:
    hunt = campaign.get_hunt(payload["hunt_id"])
    move = hunt_machine.update_positions(
        hunt, payload["survivor_position"], payload["quarry_position"], space_rules,
    )
    events = [hunt_positions_updated(
        move.hunt.id,
        move.hunt.survivor_position,
        move.hunt.quarry_position,
        move.note,
        move.overlap,
    )]
    if move.outcome is not None:
        _store_resolved_hunt(campaign, move.hunt)
        events.append(hunt_resolved(move.hunt.id, move.outcome))
    else:
        campaign.hunts = upsert_by_id(campaign.hunts, move.hunt)
    return events


def _handle_start_showdown_from_hunt(campaign: Campaign, action: Action) -> list[CampaignEvent]:
    hunt = _target_hunt(campaign, action)
    require_idle_settlement(campaign, hunt.settlement_id)
    showdown = hunt_machine.seed_showdown(hunt, next_showdown_id(campaign), action.payload.get("ambush"))
    campaign.showdowns = upsert_by_id(campaign.showdowns, showdown)
    campaign.selected_showdown_id = showdown.id
    return [showdown_started(
        showdown.id,
        showdown.settlement_id,
        showdown.monster_name,
        showdown.monster_level,
        showdown.survivors,
        showdown.ambush,
        hunt_id=hunt.id,
    )]


def _handle_begin_showdown(
    campaign: Campaign,
    payload: dict,
    monster_defs: dict[str, MonsterDefinition] | None,
) -> list[CampaignEvent]:
    showdown = showdown_machine.begin_showdown(
        campaign,
        payload["settlement_id"],
        payload["monster_name"],
        payload["monster_level"],
        payload["survivor_ids"],
        scout_id=payload.get("scout_id"),
        monster_type=payload.get("monster_type"),
        ambush=payload.get("ambush") or "none",
        monster_defs=monster_defs,
    )
    campaign.showdowns = upsert_by_id(campaign.showdowns, showdown)
    campaign.selected_showdown_id = showdown.id
    campaign.selected_settlement_id = showdown.settlement_id
    return [showdown_started(
        showdown.id,
        showdown.settlement_id,
        showdown.monster_name,
        showdown.monster_level,
        showdown.survivors,
        showdown.ambush,
    )]


def _handle_next_turn(campaign: Campaign, action: Action) -> list[CampaignEvent]:
    before = _target_showdown(campaign, action)
    showdown = showdown_machine.next_turn(before, force=bool(action.payload.get("force")))
    campaign.showdowns = upsert_by_id(campaign.showdowns, showdown)
    events = [turn_changed(
        showdown.id, before.turn.current_turn, showdown.turn.current_turn, showdown.turn.round,
    )]
    if showdown.turn.round != before.turn.round:
        events.append(round_started(showdown.id, showdown.turn.round))
    return events
