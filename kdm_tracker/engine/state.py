"""
Campaign state representation.
One Campaign aggregate owns settlements, survivors, hunts and showdowns.
Includes JSON serialization for save/load and backup/restore. Persisted keys are
camelCase so exported files keep the layout other tools already read.
"""

import json
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any

from kdm_tracker.engine import (
    DEFAULT_QUARRY_POSITION,
    DEFAULT_SURVIVOR_POSITION,
)

# Turn owners
TURN_MONSTER = "monster"
TURN_SURVIVORS = "survivors"

# Who ambushed whom when a showdown starts
AMBUSH_NONE = "none"
AMBUSH_SURVIVORS = "survivors"
AMBUSH_MONSTER = "monster"

MONSTER_TYPE_QUARRY = "quarry"
MONSTER_TYPE_NEMESIS = "nemesis"

# Activity lifecycle (a hunt/showdown that has never been committed is "not started")
STATUS_ACTIVE = "active"
STATUS_RESOLVED = "resolved"

SURVIVOR_TYPE_CORE = "Core"
SURVIVOR_TYPE_ARC = "Arc"


def _int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _opt_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _bool(value: Any, default: bool) -> bool:
    return bool(value) if value is not None else default


def _str(value: Any, default: str = "") -> str:
    return str(value) if value is not None else default


def _opt_str(value: Any) -> str | None:
    return str(value) if value is not None else None


def _ensure_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(x) for x in value]


def _ensure_int_list(value: Any) -> list[int]:
    if not isinstance(value, list):
        return []
    out = []
    for x in value:
        parsed = _opt_int(x)
        if parsed is not None:
            out.append(parsed)
    return out


def _dict_list(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [x for x in value if isinstance(x, dict)]


def camel_key(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


# ===== Settlement =====

@dataclass
class SettlementQuarry:
    """A quarry the settlement can hunt."""
    name: str
    node: str = ""
    unlocked: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "node": self.node, "unlocked": self.unlocked}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SettlementQuarry":
        return cls(
            name=_str(data.get("name")),
            node=_str(data.get("node")),
            unlocked=_bool(data.get("unlocked"), False),
        )


@dataclass
class SettlementNemesis:
    name: str
    unlocked: bool = False
    level1: bool = False
    level2: bool = False
    level3: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "unlocked": self.unlocked,
            "level1": self.level1,
            "level2": self.level2,
            "level3": self.level3,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SettlementNemesis":
        return cls(
            name=_str(data.get("name")),
            unlocked=_bool(data.get("unlocked"), False),
            level1=_bool(data.get("level1"), False),
            level2=_bool(data.get("level2"), False),
            level3=_bool(data.get("level3"), False),
        )


@dataclass
class Milestone:
    name: str
    event: str
    complete: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "event": self.event, "complete": self.complete}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Milestone":
        return cls(
            name=_str(data.get("name")),
            event=_str(data.get("event")),
            complete=_bool(data.get("complete"), False),
        )


@dataclass
class Principle:
    """A principle with two mutually exclusive options."""
    name: str
    option1_name: str
    option2_name: str
    option1_selected: bool = False
    option2_selected: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "option1Name": self.option1_name,
            "option1Selected": self.option1_selected,
            "option2Name": self.option2_name,
            "option2Selected": self.option2_selected,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Principle":
        return cls(
            name=_str(data.get("name")),
            option1_name=_str(data.get("option1Name")),
            option2_name=_str(data.get("option2Name")),
            option1_selected=_bool(data.get("option1Selected"), False),
            option2_selected=_bool(data.get("option2Selected"), False),
        )


@dataclass
class Resource:
    name: str
    category: str
    types: list[str] = field(default_factory=list)
    amount: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "types": list(self.types),
            "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Resource":
        return cls(
            name=_str(data.get("name")),
            category=_str(data.get("category")),
            types=_ensure_str_list(data.get("types")),
            amount=_int(data.get("amount"), 0),
        )


@dataclass
class TimelineYear:
    completed: bool = False
    entries: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"completed": self.completed, "entries": list(self.entries)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimelineYear":
        return cls(
            completed=_bool(data.get("completed"), False),
            entries=_ensure_str_list(data.get("entries")),
        )


@dataclass
class Settlement:
    """A settlement. Survivors link back to it by id."""
    id: int
    name: str
    survivor_type: str = SURVIVOR_TYPE_CORE
    uses_scouts: bool = False
    campaign_type: str = "People of the Lantern"
    quarries: list[SettlementQuarry] = field(default_factory=list)
    nemeses: list[SettlementNemesis] = field(default_factory=list)
    milestones: list[Milestone] = field(default_factory=list)
    principles: list[Principle] = field(default_factory=list)
    resources: list[Resource] = field(default_factory=list)
    timeline: list[TimelineYear] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "survivorType": self.survivor_type,
            "usesScouts": self.uses_scouts,
            "campaignType": self.campaign_type,
            "quarries": [q.to_dict() for q in self.quarries],
            "nemeses": [n.to_dict() for n in self.nemeses],
            "milestones": [m.to_dict() for m in self.milestones],
            "principles": [p.to_dict() for p in self.principles],
            "resources": [r.to_dict() for r in self.resources],
            "timeline": [t.to_dict() for t in self.timeline],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settlement":
        if not isinstance(data, dict):
            data = {}
        return cls(
            id=_int(data.get("id"), 0),
            name=_str(data.get("name")),
            survivor_type=_str(data.get("survivorType"), SURVIVOR_TYPE_CORE),
            uses_scouts=_bool(data.get("usesScouts"), False),
            campaign_type=_str(data.get("campaignType"), "People of the Lantern"),
            quarries=[SettlementQuarry.from_dict(q) for q in _dict_list(data.get("quarries"))],
            nemeses=[SettlementNemesis.from_dict(n) for n in _dict_list(data.get("nemeses"))],
            milestones=[Milestone.from_dict(m) for m in _dict_list(data.get("milestones"))],
            principles=[Principle.from_dict(p) for p in _dict_list(data.get("principles"))],
            resources=[Resource.from_dict(r) for r in _dict_list(data.get("resources"))],
            timeline=[TimelineYear.from_dict(t) for t in _dict_list(data.get("timeline"))],
        )


# ===== Survivor =====

@dataclass
class Survivor:
    """A survivor. Hunts and showdowns refer to survivors by id only."""
    id: int
    settlement_id: int
    name: str = ""
    gender: str = "F"
    accuracy: int = 0
    evasion: int = 0
    luck: int = 0
    speed: int = 0
    strength: int = 0
    movement: int = 5
    survival: int = 1
    insanity: int = 0
    hunt_xp: int = 0
    courage: int = 0
    understanding: int = 0
    dead: bool = False
    retired: bool = False
    skip_next_hunt: bool = False

    def can_depart(self) -> bool:
        """True if the survivor may join a new hunt or showdown."""
        return not (self.dead or self.retired or self.skip_next_hunt)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "settlementId": self.settlement_id,
            "name": self.name,
            "gender": self.gender,
            "accuracy": self.accuracy,
            "evasion": self.evasion,
            "luck": self.luck,
            "speed": self.speed,
            "strength": self.strength,
            "movement": self.movement,
            "survival": self.survival,
            "insanity": self.insanity,
            "huntXP": self.hunt_xp,
            "courage": self.courage,
            "understanding": self.understanding,
            "dead": self.dead,
            "retired": self.retired,
            "skipNextHunt": self.skip_next_hunt,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Survivor":
        if not isinstance(data, dict):
            data = {}
        return cls(
            id=_int(data.get("id"), 0),
            settlement_id=_int(data.get("settlementId"), 0),
            name=_str(data.get("name")),
            gender=_str(data.get("gender"), "F"),
            accuracy=_int(data.get("accuracy"), 0),
            evasion=_int(data.get("evasion"), 0),
            luck=_int(data.get("luck"), 0),
            speed=_int(data.get("speed"), 0),
            strength=_int(data.get("strength"), 0),
            movement=_int(data.get("movement"), 5),
            survival=_int(data.get("survival"), 1),
            insanity=_int(data.get("insanity"), 0),
            hunt_xp=_int(data.get("huntXP"), 0),
            courage=_int(data.get("courage"), 0),
            understanding=_int(data.get("understanding"), 0),
            dead=_bool(data.get("dead"), False),
            retired=_bool(data.get("retired"), False),
            skip_next_hunt=_bool(data.get("skipNextHunt"), False),
        )


# ===== Monsters =====

@dataclass
class AIDeck:
    """AI deck composition, tracked as counts only."""
    basic: int = 0
    advanced: int = 0
    legendary: int = 0
    overtone: int = 0

    def total(self) -> int:
        return self.basic + self.advanced + self.legendary + self.overtone

    def to_dict(self) -> dict[str, Any]:
        return {
            "basic": self.basic,
            "advanced": self.advanced,
            "legendary": self.legendary,
            "overtone": self.overtone,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AIDeck":
        if not isinstance(data, dict):
            data = {}
        return cls(
            basic=_int(data.get("basic"), 0),
            advanced=_int(data.get("advanced"), 0),
            legendary=_int(data.get("legendary"), 0),
            overtone=_int(data.get("overtone"), 0),
        )


# Integer stats carried by a monster on the board, each with a matching token counter
MONSTER_STAT_FIELDS = ("accuracy", "damage", "evasion", "luck", "movement", "speed", "strength", "toughness")


@dataclass
class MonsterStats:
    """Stat block of one monster instance during a hunt or showdown."""
    name: str
    accuracy: int = 0
    damage: int = 0
    evasion: int = 0
    luck: int = 0
    # Negative movement means unlimited
    movement: int = 1
    speed: int = 0
    strength: int = 0
    toughness: int = 0
    accuracy_tokens: int = 0
    damage_tokens: int = 0
    evasion_tokens: int = 0
    luck_tokens: int = 0
    movement_tokens: int = 0
    speed_tokens: int = 0
    strength_tokens: int = 0
    toughness_tokens: int = 0
    wounds: int = 0
    ai_deck: AIDeck = field(default_factory=AIDeck)
    ai_deck_remaining: int = 0
    knocked_down: bool = False
    moods: list[str] = field(default_factory=list)
    traits: list[str] = field(default_factory=list)
    notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        for stat in MONSTER_STAT_FIELDS:
            out[stat] = getattr(self, stat)
            out[camel_key(f"{stat}_tokens")] = getattr(self, f"{stat}_tokens")
        out.update({
            "wounds": self.wounds,
            "aiDeck": self.ai_deck.to_dict(),
            "aiDeckRemaining": self.ai_deck_remaining,
            "knockedDown": self.knocked_down,
            "moods": list(self.moods),
            "traits": list(self.traits),
            "notes": self.notes,
        })
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MonsterStats":
        if not isinstance(data, dict):
            data = {}
        stats: dict[str, Any] = {}
        for stat in MONSTER_STAT_FIELDS:
            stats[stat] = _int(data.get(stat), 1 if stat == "movement" else 0)
            stats[f"{stat}_tokens"] = _int(data.get(camel_key(f"{stat}_tokens")), 0)
        return cls(
            name=_str(data.get("name")),
            wounds=_int(data.get("wounds"), 0),
            ai_deck=AIDeck.from_dict(data.get("aiDeck")),
            ai_deck_remaining=_int(data.get("aiDeckRemaining"), 0),
            knocked_down=_bool(data.get("knockedDown"), False),
            moods=_ensure_str_list(data.get("moods")),
            traits=_ensure_str_list(data.get("traits")),
            notes=_str(data.get("notes")),
            **stats,
        )


# ===== Transient per-survivor details =====

# Token counters shared by hunt and showdown survivor details (may be negative)
SURVIVOR_TOKEN_FIELDS = (
    "accuracy_tokens",
    "evasion_tokens",
    "insanity_tokens",
    "luck_tokens",
    "movement_tokens",
    "speed_tokens",
    "strength_tokens",
    "survival_tokens",
)

# Showdown-only counters (never negative)
SHOWDOWN_COUNT_FIELDS = ("bleeding_tokens", "block_tokens", "deflect_tokens")


@dataclass
class HuntSurvivorDetails:
    """Token counters that only exist while a hunt is active."""
    survivor_id: int
    accuracy_tokens: int = 0
    evasion_tokens: int = 0
    insanity_tokens: int = 0
    luck_tokens: int = 0
    movement_tokens: int = 0
    speed_tokens: int = 0
    strength_tokens: int = 0
    survival_tokens: int = 0
    notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.survivor_id}
        for name in SURVIVOR_TOKEN_FIELDS:
            out[camel_key(name)] = getattr(self, name)
        out["notes"] = self.notes
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HuntSurvivorDetails":
        tokens = {name: _int(data.get(camel_key(name)), 0) for name in SURVIVOR_TOKEN_FIELDS}
        return cls(survivor_id=_int(data.get("id"), 0), notes=_str(data.get("notes")), **tokens)


@dataclass
class ShowdownSurvivorDetails:
    """Combat-only counters that only exist while a showdown is active."""
    survivor_id: int
    accuracy_tokens: int = 0
    evasion_tokens: int = 0
    insanity_tokens: int = 0
    luck_tokens: int = 0
    movement_tokens: int = 0
    speed_tokens: int = 0
    strength_tokens: int = 0
    survival_tokens: int = 0
    bleeding_tokens: int = 0
    block_tokens: int = 0
    deflect_tokens: int = 0
    knocked_down: bool = False
    priority_target: bool = False
    notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.survivor_id}
        for name in SURVIVOR_TOKEN_FIELDS + SHOWDOWN_COUNT_FIELDS:
            out[camel_key(name)] = getattr(self, name)
        out.update({
            "knockedDown": self.knocked_down,
            "priorityTarget": self.priority_target,
            "notes": self.notes,
        })
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShowdownSurvivorDetails":
        tokens = {
            name: _int(data.get(camel_key(name)), 0)
            for name in SURVIVOR_TOKEN_FIELDS + SHOWDOWN_COUNT_FIELDS
        }
        return cls(
            survivor_id=_int(data.get("id"), 0),
            knocked_down=_bool(data.get("knockedDown"), False),
            priority_target=_bool(data.get("priorityTarget"), False),
            notes=_str(data.get("notes")),
            **tokens,
        )


# ===== Hunt =====

@dataclass
class Hunt:
    """
    An active (or resolved) hunt.
    Positions are hunt board spaces 0..12; survivors start on 0, the quarry on 6.
    """
    id: int
    settlement_id: int
    quarry_name: str
    quarry_level: str
    survivors: list[int]
    scout: int | None = None
    survivor_position: int = DEFAULT_SURVIVOR_POSITION
    quarry_position: int = DEFAULT_QUARRY_POSITION
    # True when the quarry reached the survivors before they reached it
    ambush: bool = False
    status: str = STATUS_ACTIVE
    # "encounter", "ambush", "starvation", "scenario" or "abandoned" once resolved
    outcome: str | None = None
    # Event labels for the free board spaces: position -> "basic" | "monster"
    hunt_board: dict[int, str] = field(default_factory=dict)
    survivor_details: list[HuntSurvivorDetails] = field(default_factory=list)
    monsters: list[MonsterStats] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "settlementId": self.settlement_id,
            "quarryName": self.quarry_name,
            "quarryLevel": self.quarry_level,
            "survivors": list(self.survivors),
            "scout": self.scout,
            "survivorPosition": self.survivor_position,
            "quarryPosition": self.quarry_position,
            "ambush": self.ambush,
            "status": self.status,
            "outcome": self.outcome,
            "huntBoard": {str(pos): label for pos, label in sorted(self.hunt_board.items())},
            "survivorDetails": [d.to_dict() for d in self.survivor_details],
            "monsters": [m.to_dict() for m in self.monsters],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Hunt":
        if not isinstance(data, dict):
            data = {}
        board_raw = data.get("huntBoard")
        if not isinstance(board_raw, dict):
            board_raw = {}
        hunt_board = {}
        for pos, label in board_raw.items():
            parsed = _opt_int(pos)
            if parsed is not None and label:
                hunt_board[parsed] = str(label)
        return cls(
            id=_int(data.get("id"), 0),
            settlement_id=_int(data.get("settlementId"), 0),
            quarry_name=_str(data.get("quarryName")),
            quarry_level=_str(data.get("quarryLevel"), "1"),
            survivors=_ensure_int_list(data.get("survivors")),
            scout=_opt_int(data.get("scout")),
            survivor_position=_int(data.get("survivorPosition"), DEFAULT_SURVIVOR_POSITION),
            quarry_position=_int(data.get("quarryPosition"), DEFAULT_QUARRY_POSITION),
            ambush=_bool(data.get("ambush"), False),
            status=_str(data.get("status"), STATUS_ACTIVE),
            outcome=_opt_str(data.get("outcome")),
            hunt_board=hunt_board,
            survivor_details=[
                HuntSurvivorDetails.from_dict(d) for d in _dict_list(data.get("survivorDetails"))
            ],
            monsters=[MonsterStats.from_dict(m) for m in _dict_list(data.get("monsters"))],
        )


# ===== Showdown =====

@dataclass
class MonsterTurnState:
    ai_card_drawn: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"aiCardDrawn": self.ai_card_drawn}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MonsterTurnState":
        if not isinstance(data, dict):
            data = {}
        return cls(ai_card_drawn=_bool(data.get("aiCardDrawn"), False))


@dataclass
class SurvivorTurnState:
    """Movement and activation usage for one survivor in the current round."""
    survivor_id: int
    activation_used: bool = False
    movement_used: bool = False

    @property
    def consumed(self) -> bool:
        return self.activation_used and self.movement_used

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.survivor_id,
            "activationUsed": self.activation_used,
            "movementUsed": self.movement_used,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SurvivorTurnState":
        return cls(
            survivor_id=_int(data.get("id"), 0),
            activation_used=_bool(data.get("activationUsed"), False),
            movement_used=_bool(data.get("movementUsed"), False),
        )


@dataclass
class ShowdownTurn:
    """Whose turn it is and what has been consumed this round. Round 0 is an ambush round."""
    current_turn: str = TURN_MONSTER
    monster_state: MonsterTurnState = field(default_factory=MonsterTurnState)
    survivor_states: list[SurvivorTurnState] = field(default_factory=list)
    round: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentTurn": self.current_turn,
            "monsterState": self.monster_state.to_dict(),
            "survivorStates": [s.to_dict() for s in self.survivor_states],
            "round": self.round,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShowdownTurn":
        if not isinstance(data, dict):
            data = {}
        return cls(
            current_turn=_str(data.get("currentTurn"), TURN_MONSTER),
            monster_state=MonsterTurnState.from_dict(data.get("monsterState")),
            survivor_states=[
                SurvivorTurnState.from_dict(s) for s in _dict_list(data.get("survivorStates"))
            ],
            round=_int(data.get("round"), 1),
        )


@dataclass
class Showdown:
    """An active (or resolved) showdown against a quarry or nemesis."""
    id: int
    settlement_id: int
    monster_name: str
    monster_level: str
    monster_type: str
    survivors: list[int]
    scout: int | None = None
    ambush: str = AMBUSH_NONE
    turn: ShowdownTurn = field(default_factory=ShowdownTurn)
    status: str = STATUS_ACTIVE
    outcome: str | None = None
    survivor_details: list[ShowdownSurvivorDetails] = field(default_factory=list)
    monsters: list[MonsterStats] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "settlementId": self.settlement_id,
            "monsterName": self.monster_name,
            "monsterLevel": self.monster_level,
            "monsterType": self.monster_type,
            "survivors": list(self.survivors),
            "scout": self.scout,
            "ambush": self.ambush,
            "turn": self.turn.to_dict(),
            "status": self.status,
            "outcome": self.outcome,
            "survivorDetails": [d.to_dict() for d in self.survivor_details],
            "monsters": [m.to_dict() for m in self.monsters],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Showdown":
        if not isinstance(data, dict):
            data = {}
        return cls(
            id=_int(data.get("id"), 0),
            settlement_id=_int(data.get("settlementId"), 0),
            monster_name=_str(data.get("monsterName")),
            monster_level=_str(data.get("monsterLevel"), "1"),
            monster_type=_str(data.get("monsterType"), MONSTER_TYPE_QUARRY),
            survivors=_ensure_int_list(data.get("survivors")),
            scout=_opt_int(data.get("scout")),
            ambush=_str(data.get("ambush"), AMBUSH_NONE),
            turn=ShowdownTurn.from_dict(data.get("turn")),
            status=_str(data.get("status"), STATUS_ACTIVE),
            outcome=_opt_str(data.get("outcome")),
            survivor_details=[
                ShowdownSurvivorDetails.from_dict(d) for d in _dict_list(data.get("survivorDetails"))
            ],
            monsters=[MonsterStats.from_dict(m) for m in _dict_list(data.get("monsters"))],
        )


# ===== Campaign =====

# Persisted key -> Campaign attribute
CAMPAIGN_KEYS = {
    "settlements": "settlements",
    "survivors": "survivors",
    "hunts": "hunts",
    "showdowns": "showdowns",
    "selectedSettlementId": "selected_settlement_id",
    "selectedSurvivorId": "selected_survivor_id",
    "selectedHuntId": "selected_hunt_id",
    "selectedShowdownId": "selected_showdown_id",
    "selectedTab": "selected_tab",
    "disableToasts": "disable_toasts",
    "version": "version",
}


@dataclass
class Campaign:
    """Complete campaign state. Exactly one instance is persisted."""
    settlements: list[Settlement] = field(default_factory=list)
    survivors: list[Survivor] = field(default_factory=list)
    hunts: list[Hunt] = field(default_factory=list)
    showdowns: list[Showdown] = field(default_factory=list)
    selected_settlement_id: int | None = None
    selected_survivor_id: int | None = None
    selected_hunt_id: int | None = None
    selected_showdown_id: int | None = None
    selected_tab: str | None = None
    disable_toasts: bool = False
    version: str | None = None

    def copy(self) -> "Campaign":
        """Return a deep copy of this campaign."""
        return deepcopy(self)

    def get_settlement(self, settlement_id: int | None) -> Settlement | None:
        return next((s for s in self.settlements if s.id == settlement_id), None)

    def get_survivor(self, survivor_id: int | None) -> Survivor | None:
        return next((s for s in self.survivors if s.id == survivor_id), None)

    def get_hunt(self, hunt_id: int | None) -> Hunt | None:
        return next((h for h in self.hunts if h.id == hunt_id), None)

    def get_showdown(self, showdown_id: int | None) -> Showdown | None:
        return next((s for s in self.showdowns if s.id == showdown_id), None)

    # ===== Serialization Methods =====

    def to_dict(self) -> dict[str, Any]:
        """Convert Campaign to a dictionary for JSON serialization."""
        return {
            "settlements": [s.to_dict() for s in self.settlements],
            "survivors": [s.to_dict() for s in self.survivors],
            "hunts": [h.to_dict() for h in self.hunts],
            "showdowns": [s.to_dict() for s in self.showdowns],
            "selectedSettlementId": self.selected_settlement_id,
            "selectedSurvivorId": self.selected_survivor_id,
            "selectedHuntId": self.selected_hunt_id,
            "selectedShowdownId": self.selected_showdown_id,
            "selectedTab": self.selected_tab,
            "disableToasts": self.disable_toasts,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Campaign":
        """Create Campaign from a dictionary (missing/None fields fall back to defaults)."""
        if not isinstance(data, dict):
            data = {}
        # Older exports kept disableToasts under settings
        settings = data.get("settings") if isinstance(data.get("settings"), dict) else {}
        disable_toasts = data.get("disableToasts", settings.get("disableToasts"))
        return cls(
            settlements=[Settlement.from_dict(s) for s in _dict_list(data.get("settlements"))],
            survivors=[Survivor.from_dict(s) for s in _dict_list(data.get("survivors"))],
            hunts=[Hunt.from_dict(h) for h in _dict_list(data.get("hunts"))],
            showdowns=[Showdown.from_dict(s) for s in _dict_list(data.get("showdowns"))],
            selected_settlement_id=_opt_int(data.get("selectedSettlementId")),
            selected_survivor_id=_opt_int(data.get("selectedSurvivorId")),
            selected_hunt_id=_opt_int(data.get("selectedHuntId")),
            selected_showdown_id=_opt_int(data.get("selectedShowdownId")),
            selected_tab=_opt_str(data.get("selectedTab")),
            disable_toasts=_bool(disable_toasts, False),
            version=_opt_str(data.get("version")),
        )

    def to_json(self, indent: int = 2) -> str:
        """Serialize Campaign to a JSON string (pretty-printed by default)."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> "Campaign":
        """Deserialize Campaign from a JSON string."""
        return cls.from_dict(json.loads(json_str))

    def save(self, filepath: str) -> None:
        """Save Campaign to a JSON file."""
        with open(filepath, "w") as f:
            f.write(self.to_json())

    @classmethod
    def load(cls, filepath: str) -> "Campaign":
        """Load Campaign from a JSON file."""
        with open(filepath, "r") as f:
            return cls.from_json(f.read())


def patch_from_dict(data: dict[str, Any]) -> dict[str, Any]:
    """
    Parse a persisted-layout patch (camelCase keys) into Campaign attribute values.
    Only keys present in `data` appear in the result; unknown keys are ignored.
    """
    if not isinstance(data, dict):
        return {}
    parsed = Campaign.from_dict(data)
    return {attr: getattr(parsed, attr) for key, attr in CAMPAIGN_KEYS.items() if key in data}
