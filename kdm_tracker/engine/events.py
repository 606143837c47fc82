"""
Campaign events for UI hooks and logging.
Events describe what happened while an action was applied. Each carries the short
message a collaborator shows the player.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class CampaignEvent:
    """Base event class. All events have a type, payload and player-facing message."""
    type: str
    payload: dict[str, Any]
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload, "message": self.message}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CampaignEvent":
        return cls(type=data["type"], payload=data["payload"], message=data.get("message", ""))


# ===== Event Type Constants =====

# Campaign events
CAMPAIGN_SAVED = "campaign_saved"
CAMPAIGN_IMPORTED = "campaign_imported"

# Hunt events
HUNT_STARTED = "hunt_started"
HUNT_POSITIONS_UPDATED = "hunt_positions_updated"
HUNT_BOARD_CHANGED = "hunt_board_changed"
HUNT_SURVIVOR_UPDATED = "hunt_survivor_updated"
HUNT_RESOLVED = "hunt_resolved"

# Showdown events
SHOWDOWN_STARTED = "showdown_started"
AI_CARD_DRAWN = "ai_card_drawn"
SURVIVOR_ACTED = "survivor_acted"
TURN_CHANGED = "turn_changed"
ROUND_STARTED = "round_started"
SHOWDOWN_SURVIVOR_UPDATED = "showdown_survivor_updated"
SHOWDOWN_ENDED = "showdown_ended"

# Shared
MONSTER_UPDATED = "monster_updated"


# ===== Messages =====

CAMPAIGN_SAVED_MESSAGE = "Settlement records preserved!"
CAMPAIGN_IMPORTED_MESSAGE = "Settlement chronicles loaded!"

HUNT_OUTCOME_MESSAGES = {
    "encounter": "The survivors find their quarry. The showdown awaits.",
    "ambush": "The quarry ambushes the survivors!",
    "starvation": "The survivors starve in the darkness. The hunt is lost.",
    "scenario": "The hunt gives way to something stranger.",
    "abandoned": "The hunt ends. Survivors return to the relative safety of the settlement.",
}

AMBUSH_MESSAGES = {
    "survivors": "The survivors ambush their quarry! The showdown begins.",
    "monster": "The monster ambushes the survivors! The showdown begins.",
    "none": "The showdown begins.",
}

SHOWDOWN_OUTCOME_MESSAGES = {
    "victory": "The monster falls. The survivors return victorious.",
    "defeat": "The lantern gutters out. The survivors are lost.",
    "abandoned": "The survivors flee the showdown.",
}


# ===== Event Factory Functions =====

def campaign_saved(keys: list[str], message: str | None = None) -> CampaignEvent:
    return CampaignEvent(CAMPAIGN_SAVED, {
        "keys": keys,  # persisted top-level keys replaced by the commit
    }, message or CAMPAIGN_SAVED_MESSAGE)


def campaign_imported(
    settlements: int,
    survivors: int,
    hunts: int,
    showdowns: int,
) -> CampaignEvent:
    return CampaignEvent(CAMPAIGN_IMPORTED, {
        "settlements": settlements,
        "survivors": survivors,
        "hunts": hunts,
        "showdowns": showdowns,
    }, CAMPAIGN_IMPORTED_MESSAGE)


def hunt_started(
    hunt_id: int,
    settlement_id: int,
    quarry_name: str,
    quarry_level: str,
    survivors: list[int],
    scout: int | None,
) -> CampaignEvent:
    return CampaignEvent(HUNT_STARTED, {
        "hunt_id": hunt_id,
        "settlement_id": settlement_id,
        "quarry_name": quarry_name,
        "quarry_level": quarry_level,
        "survivors": survivors,
        "scout": scout,
    }, f"The hunt for {quarry_name} begins. Survivors venture into the darkness.")


def hunt_positions_updated(
    hunt_id: int,
    survivor_position: int,
    quarry_position: int,
    note: str,
    overlap: bool,
) -> CampaignEvent:
    """Emitted on every accepted board move. `note` is "Survivors moved." or "Quarry moved."."""
    return CampaignEvent(HUNT_POSITIONS_UPDATED, {
        "hunt_id": hunt_id,
        "survivor_position": survivor_position,
        "quarry_position": quarry_position,
        "overlap": overlap,
    }, note)


def hunt_board_changed(hunt_id: int, position: int, event: str | None) -> CampaignEvent:
    return CampaignEvent(HUNT_BOARD_CHANGED, {
        "hunt_id": hunt_id,
        "position": position,
        "event": event,  # "basic", "monster" or None when cleared
    }, f"Hunt event on space {position} {'set to ' + event if event else 'cleared'}.")


def hunt_survivor_updated(hunt_id: int, survivor_id: int, changes: dict[str, Any]) -> CampaignEvent:
    return CampaignEvent(HUNT_SURVIVOR_UPDATED, {
        "hunt_id": hunt_id,
        "survivor_id": survivor_id,
        "changes": changes,
    }, "Survivor hunt details updated.")


def hunt_resolved(hunt_id: int, outcome: str) -> CampaignEvent:
    return CampaignEvent(HUNT_RESOLVED, {
        "hunt_id": hunt_id,
        "outcome": outcome,
    }, HUNT_OUTCOME_MESSAGES.get(outcome, "The hunt ends."))


def showdown_started(
    showdown_id: int,
    settlement_id: int,
    monster_name: str,
    monster_level: str,
    survivors: list[int],
    ambush: str,
    hunt_id: int | None = None,
) -> CampaignEvent:
    payload = {
        "showdown_id": showdown_id,
        "settlement_id": settlement_id,
        "monster_name": monster_name,
        "monster_level": monster_level,
        "survivors": survivors,
        "ambush": ambush,
    }
    if hunt_id is not None:
        payload["hunt_id"] = hunt_id
    return CampaignEvent(SHOWDOWN_STARTED, payload, AMBUSH_MESSAGES.get(ambush, "The showdown begins."))


def ai_card_drawn(showdown_id: int, monster_name: str, ai_deck_remaining: int | None) -> CampaignEvent:
    return CampaignEvent(AI_CARD_DRAWN, {
        "showdown_id": showdown_id,
        "monster_name": monster_name,
        "ai_deck_remaining": ai_deck_remaining,
    }, f"{monster_name} draws an AI card.")


def survivor_acted(
    showdown_id: int,
    survivor_id: int,
    activation_used: bool,
    movement_used: bool,
) -> CampaignEvent:
    return CampaignEvent(SURVIVOR_ACTED, {
        "showdown_id": showdown_id,
        "survivor_id": survivor_id,
        "activation_used": activation_used,
        "movement_used": movement_used,
    }, "Survivor turn updated.")


def turn_changed(showdown_id: int, old_turn: str, new_turn: str, round_number: int) -> CampaignEvent:
    return CampaignEvent(TURN_CHANGED, {
        "showdown_id": showdown_id,
        "old_turn": old_turn,
        "new_turn": new_turn,
        "round": round_number,
    }, "The monster's turn begins." if new_turn == "monster" else "The survivors' turn begins.")


def round_started(showdown_id: int, round_number: int) -> CampaignEvent:
    return CampaignEvent(ROUND_STARTED, {
        "showdown_id": showdown_id,
        "round": round_number,
    }, f"Round {round_number} begins.")


def showdown_survivor_updated(
    showdown_id: int,
    survivor_id: int,
    changes: dict[str, Any],
) -> CampaignEvent:
    return CampaignEvent(SHOWDOWN_SURVIVOR_UPDATED, {
        "showdown_id": showdown_id,
        "survivor_id": survivor_id,
        "changes": changes,
    }, "Survivor showdown details updated.")


def monster_updated(
    activity: str,  # "hunt" or "showdown"
    activity_id: int,
    monster_index: int,
    changes: dict[str, Any],
) -> CampaignEvent:
    return CampaignEvent(MONSTER_UPDATED, {
        "activity": activity,
        "activity_id": activity_id,
        "monster_index": monster_index,
        "changes": changes,
    }, "The tales of this hunt are recorded for future generations."
        if "notes" in changes else "The monster has been updated.")


def showdown_ended(showdown_id: int, outcome: str, rounds: int) -> CampaignEvent:
    return CampaignEvent(SHOWDOWN_ENDED, {
        "showdown_id": showdown_id,
        "outcome": outcome,
        "rounds": rounds,
    }, SHOWDOWN_OUTCOME_MESSAGES.get(outcome, "The showdown ends."))
