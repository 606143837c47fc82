"""
Schema validation for campaign entities.
Each entity kind has a declarative rule table: (field, predicate, error kind, message).
Validation never mutates and never raises for well-typed input; it returns the first
violated rule as a ValidationResult.
"""

from dataclasses import dataclass
from typing import Any, Callable

from kdm_tracker.engine import BOARD_SPACES, MAX_PARTY_SIZE, MIN_PARTY_SIZE, MONSTER_LEVELS
from kdm_tracker.engine.board import EVENT_BASIC, EVENT_MONSTER, FIXED_SPACES
from kdm_tracker.engine.errors import (
    BoundsError,
    CampaignError,
    EmptyNameError,
    EntityNotFoundError,
    PartySizeError,
    ScoutError,
)
from kdm_tracker.engine.state import (
    AMBUSH_MONSTER,
    AMBUSH_NONE,
    AMBUSH_SURVIVORS,
    MONSTER_STAT_FIELDS,
    MONSTER_TYPE_NEMESIS,
    MONSTER_TYPE_QUARRY,
    SHOWDOWN_COUNT_FIELDS,
    STATUS_ACTIVE,
    STATUS_RESOLVED,
    SURVIVOR_TOKEN_FIELDS,
    SURVIVOR_TYPE_ARC,
    SURVIVOR_TYPE_CORE,
    TURN_MONSTER,
    TURN_SURVIVORS,
    Campaign,
    Hunt,
    MonsterStats,
    Settlement,
    Showdown,
    Survivor,
    camel_key,
)

HUNT_EVENT_TYPES = (EVENT_BASIC, EVENT_MONSTER)


@dataclass
class ValidationResult:
    """Result of entity validation."""
    valid: bool
    error: CampaignError | None = None

    @property
    def message(self) -> str | None:
        return self.error.message if self.error else None

    @property
    def field(self) -> str | None:
        return self.error.field if self.error else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "error": self.error.to_dict() if self.error else None,
        }


# ===== Predicates =====

def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _is_list(value: Any) -> bool:
    return isinstance(value, list)


def _is_int_text(value: Any) -> bool:
    return isinstance(value, str) and value.lstrip("-").isdigit()


def _non_empty(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _non_negative(value: Any) -> bool:
    return _is_int(value) and value >= 0


def _at_least(minimum: int) -> Callable[[Any], bool]:
    return lambda value: _is_int(value) and value >= minimum


def _between(low: int, high: int) -> Callable[[Any], bool]:
    return lambda value: _is_int(value) and low <= value <= high


def _one_of(*choices: Any) -> Callable[[Any], bool]:
    return lambda value: value in choices


def _optional(predicate: Callable[[Any], bool]) -> Callable[[Any], bool]:
    return lambda value: value is None or predicate(value)


def _each(predicate: Callable[[Any], bool]) -> Callable[[Any], bool]:
    return lambda value: isinstance(value, list) and all(predicate(x) for x in value)


def _min_members(count: int) -> Callable[[Any], bool]:
    return lambda value: isinstance(value, list) and len(value) >= count


def _max_members(count: int) -> Callable[[Any], bool]:
    return lambda value: isinstance(value, list) and len(value) <= count


def _unique(value: Any) -> bool:
    return isinstance(value, list) and len(set(value)) == len(value)


def _on_board(value: Any) -> bool:
    return _is_int(value) and 0 <= value < BOARD_SPACES


def _valid_hunt_board(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    return all(
        _on_board(pos) and pos not in FIXED_SPACES and label in HUNT_EVENT_TYPES
        for pos, label in value.items()
    )


# ===== Rule tables =====

Rule = tuple[str, Callable[[Any], bool], type[CampaignError], str]
# Nested collection: attribute name -> rules applied to each member
Nested = tuple[str, list[Rule]]
# Whole-entity check: predicate over the entity, error kind, message, field
Check = tuple[Callable[[Any], bool], type[CampaignError], str, str]

QUARRY_RULES: list[Rule] = [
    ("name", _non_empty, EmptyNameError, "A nameless quarry cannot be recorded."),
]

NEMESIS_RULES: list[Rule] = [
    ("name", _non_empty, EmptyNameError, "A nameless nemesis cannot be recorded."),
]

MILESTONE_RULES: list[Rule] = [
    ("name", _non_empty, EmptyNameError, "A nameless milestone cannot be recorded."),
    ("event", _non_empty, EmptyNameError, "A nameless event cannot be recorded."),
]

PRINCIPLE_RULES: list[Rule] = [
    ("name", _non_empty, EmptyNameError, "A nameless principle cannot be recorded."),
    ("option1_name", _non_empty, EmptyNameError, "A nameless principle option cannot be recorded."),
    ("option2_name", _non_empty, EmptyNameError, "A nameless principle option cannot be recorded."),
]

RESOURCE_RULES: list[Rule] = [
    ("name", _non_empty, EmptyNameError, "A nameless resource cannot be recorded."),
    ("amount", _non_negative, BoundsError, "Resource amount cannot be negative."),
    ("types", _min_members(1), BoundsError, "A resource must have at least one type."),
]

TIMELINE_RULES: list[Rule] = [
    ("entries", _each(_non_empty), EmptyNameError, "A nameless event cannot be recorded."),
]

SETTLEMENT_RULES: list[Rule] = [
    ("id", _non_negative, BoundsError, "Settlement ID must be a non-negative integer."),
    ("name", _non_empty, EmptyNameError, "A settlement name cannot be empty."),
    ("survivor_type", _one_of(SURVIVOR_TYPE_CORE, SURVIVOR_TYPE_ARC), BoundsError,
     "Survivor type must be Core or Arc."),
]

SETTLEMENT_NESTED: list[Nested] = [
    ("quarries", QUARRY_RULES),
    ("nemeses", NEMESIS_RULES),
    ("milestones", MILESTONE_RULES),
    ("principles", PRINCIPLE_RULES),
    ("resources", RESOURCE_RULES),
    ("timeline", TIMELINE_RULES),
]

SURVIVOR_RULES: list[Rule] = [
    ("id", _non_negative, BoundsError, "Survivor ID must be a non-negative integer."),
    ("settlement_id", _non_negative, BoundsError, "Settlement ID must be a non-negative integer."),
    ("gender", _one_of("F", "M"), BoundsError, "Gender must be F or M."),
    ("accuracy", _is_int, BoundsError, "Accuracy must be a whole number."),
    ("evasion", _is_int, BoundsError, "Evasion must be a whole number."),
    ("luck", _is_int, BoundsError, "Luck must be a whole number."),
    ("speed", _is_int, BoundsError, "Speed must be a whole number."),
    ("strength", _is_int, BoundsError, "Strength must be a whole number."),
    ("movement", _at_least(1), BoundsError, "Movement cannot be less than 1."),
    ("survival", _non_negative, BoundsError, "Survival cannot be negative."),
    ("insanity", _non_negative, BoundsError, "Insanity cannot be negative."),
    ("hunt_xp", _between(0, 16), BoundsError, "Hunt XP must be between 0 and 16."),
    ("courage", _between(0, 9), BoundsError, "Courage must be between 0 and 9."),
    ("understanding", _between(0, 9), BoundsError, "Understanding must be between 0 and 9."),
]

# Level stat blocks in reference data may omit the name (it defaults to the monster's)
MONSTER_LEVEL_RULES: list[Rule] = (
    [(stat, _is_int, BoundsError, f"Monster {stat} must be a whole number.")
     for stat in MONSTER_STAT_FIELDS if stat != "toughness"]
    + [(f"{stat}_tokens", _is_int, BoundsError, f"Monster {stat} tokens must be a whole number.")
       for stat in MONSTER_STAT_FIELDS]
    + [
        ("toughness", _non_negative, BoundsError, "Monster toughness cannot be negative."),
        ("wounds", _non_negative, BoundsError, "Monster wounds cannot be negative."),
        ("ai_deck.basic", _non_negative, BoundsError, "AI deck card counts cannot be negative."),
        ("ai_deck.advanced", _non_negative, BoundsError, "AI deck card counts cannot be negative."),
        ("ai_deck.legendary", _non_negative, BoundsError, "AI deck card counts cannot be negative."),
        ("ai_deck.overtone", _non_negative, BoundsError, "AI deck card counts cannot be negative."),
        ("ai_deck_remaining", _non_negative, BoundsError, "AI deck remaining cannot be negative."),
    ]
)

MONSTER_RULES: list[Rule] = [
    ("name", _non_empty, EmptyNameError, "Monster name is required."),
] + MONSTER_LEVEL_RULES

HUNT_DETAIL_RULES: list[Rule] = [
    ("survivor_id", _non_negative, BoundsError, "Survivor ID must be a non-negative integer."),
] + [
    (name, _is_int, BoundsError, "Survivor tokens must be whole numbers.")
    for name in SURVIVOR_TOKEN_FIELDS
]

SHOWDOWN_DETAIL_RULES: list[Rule] = HUNT_DETAIL_RULES + [
    (name, _non_negative, BoundsError, "Bleeding, block and deflect tokens cannot be negative.")
    for name in SHOWDOWN_COUNT_FIELDS
]

SURVIVOR_TURN_RULES: list[Rule] = [
    ("survivor_id", _non_negative, BoundsError, "Survivor ID must be a non-negative integer."),
]

HUNT_RULES: list[Rule] = [
    ("id", _non_negative, BoundsError, "Hunt ID must be a non-negative integer."),
    ("settlement_id", _non_negative, BoundsError, "Settlement ID must be a non-negative integer."),
    ("quarry_name", _non_empty, EmptyNameError, "The quarry name cannot be empty for a hunt."),
    ("quarry_level", _one_of(*MONSTER_LEVELS), BoundsError, "Quarry level must be 1, 2, 3 or 4."),
    ("survivors", _min_members(MIN_PARTY_SIZE), PartySizeError,
     "At least one survivor must be selected for the hunt."),
    ("survivors", _max_members(MAX_PARTY_SIZE), PartySizeError,
     "No more than four survivors can embark on a hunt."),
    ("survivors", _unique, BoundsError, "A survivor cannot join the same hunt twice."),
    ("scout", _optional(_non_negative), BoundsError, "Scout ID must be a non-negative integer."),
    ("survivor_position", _on_board, BoundsError, "Survivor position must be between 0 and 12."),
    ("quarry_position", _on_board, BoundsError, "Quarry position must be between 0 and 12."),
    ("status", _one_of(STATUS_ACTIVE, STATUS_RESOLVED), BoundsError, "Unknown hunt status."),
    ("hunt_board", _valid_hunt_board, BoundsError,
     "Hunt events may only mark spaces 1-5 and 7-11 as basic or monster."),
]

HUNT_NESTED: list[Nested] = [
    ("survivor_details", HUNT_DETAIL_RULES),
    ("monsters", MONSTER_RULES),
]

HUNT_CHECKS: list[Check] = [
    (lambda h: h.scout is None or h.scout not in h.survivors, ScoutError,
     "The selected scout cannot also be one of the survivors selected for the hunt.", "scout"),
]

SHOWDOWN_RULES: list[Rule] = [
    ("id", _non_negative, BoundsError, "Showdown ID must be a non-negative integer."),
    ("settlement_id", _non_negative, BoundsError, "Settlement ID must be a non-negative integer."),
    ("monster_name", _non_empty, EmptyNameError, "Monster name is required."),
    ("monster_level", _one_of(*MONSTER_LEVELS), BoundsError, "Monster level must be 1, 2, 3 or 4."),
    ("monster_type", _one_of(MONSTER_TYPE_QUARRY, MONSTER_TYPE_NEMESIS), BoundsError,
     "Monster type must be quarry or nemesis."),
    ("survivors", _min_members(MIN_PARTY_SIZE), PartySizeError,
     "At least one survivor must be selected for the showdown."),
    ("survivors", _max_members(MAX_PARTY_SIZE), PartySizeError,
     "No more than four survivors can face a showdown."),
    ("survivors", _unique, BoundsError, "A survivor cannot join the same showdown twice."),
    ("scout", _optional(_non_negative), BoundsError, "Scout ID must be a non-negative integer."),
    ("ambush", _one_of(AMBUSH_NONE, AMBUSH_SURVIVORS, AMBUSH_MONSTER), BoundsError,
     "Unknown ambush type."),
    ("status", _one_of(STATUS_ACTIVE, STATUS_RESOLVED), BoundsError, "Unknown showdown status."),
    ("turn.current_turn", _one_of(TURN_MONSTER, TURN_SURVIVORS), BoundsError,
     "The current turn must belong to the monster or the survivors."),
    ("turn.round", _non_negative, BoundsError, "Round cannot be negative."),
]

SHOWDOWN_NESTED: list[Nested] = [
    ("turn.survivor_states", SURVIVOR_TURN_RULES),
    ("survivor_details", SHOWDOWN_DETAIL_RULES),
    ("monsters", MONSTER_RULES),
]

SHOWDOWN_CHECKS: list[Check] = [
    (lambda s: s.scout is None or s.scout not in s.survivors, ScoutError,
     "The selected scout cannot also be one of the survivors selected for the showdown.", "scout"),
    (lambda s: all(st.survivor_id in s.survivors or st.survivor_id == s.scout
                   for st in s.turn.survivor_states),
     EntityNotFoundError, "Turn state recorded for a survivor outside the showdown.",
     "turn.survivor_states"),
]

CAMPAIGN_RULES: list[Rule] = [
    ("settlements", _is_list, BoundsError, "Settlements must be a list."),
    ("survivors", _is_list, BoundsError, "Survivors must be a list."),
    ("hunts", _is_list, BoundsError, "Hunts must be a list."),
    ("showdowns", _is_list, BoundsError, "Showdowns must be a list."),
    ("selected_settlement_id", _optional(_is_int), BoundsError,
     "The selected settlement ID must be a whole number."),
    ("selected_survivor_id", _optional(_is_int), BoundsError,
     "The selected survivor ID must be a whole number."),
    ("selected_hunt_id", _optional(_is_int), BoundsError, "The selected hunt ID must be a whole number."),
    ("selected_showdown_id", _optional(_is_int), BoundsError,
     "The selected showdown ID must be a whole number."),
    ("selected_tab", _optional(_is_str), BoundsError, "The selected tab must be text."),
    ("disable_toasts", _is_bool, BoundsError, "Disable toasts must be true or false."),
    ("version", _optional(_is_str), BoundsError, "The campaign version must be text."),
]


# ===== Rule evaluation =====

_MISSING = object()


def _get(entity: Any, path: str) -> Any:
    value = entity
    for part in path.split("."):
        value = getattr(value, part, _MISSING)
        if value is _MISSING:
            return _MISSING
    return value


def _apply_rules(entity: Any, rules: list[Rule], prefix: str = "") -> CampaignError | None:
    for field_path, predicate, error_cls, message in rules:
        value = _get(entity, field_path)
        if value is _MISSING or not predicate(value):
            return error_cls(message, field=f"{prefix}{field_path}")
    return None


def _first_violation(
    entity: Any,
    rules: list[Rule],
    nested: list[Nested] = (),
    checks: list[Check] = (),
) -> CampaignError | None:
    error = _apply_rules(entity, rules)
    if error:
        return error
    for collection, member_rules in nested:
        members = _get(entity, collection)
        if not isinstance(members, list):
            return BoundsError(f"{collection} must be a list.", field=collection)
        for index, member in enumerate(members):
            error = _apply_rules(member, member_rules, prefix=f"{collection}[{index}].")
            if error:
                return error
    for predicate, error_cls, message, field_name in checks:
        if not predicate(entity):
            return error_cls(message, field=field_name)
    return None


def _result(error: CampaignError | None) -> ValidationResult:
    return ValidationResult(False, error) if error else ValidationResult(True)


def _expect(entity: Any, cls: type, kind: str) -> CampaignError | None:
    if not isinstance(entity, cls):
        return CampaignError(f"Expected a {kind}, got {type(entity).__name__}.")
    return None


# ===== Entity validators =====

def validate_settlement(settlement: Settlement) -> ValidationResult:
    return _result(
        _expect(settlement, Settlement, "settlement")
        or _first_violation(settlement, SETTLEMENT_RULES, SETTLEMENT_NESTED)
    )


def validate_survivor(survivor: Survivor) -> ValidationResult:
    return _result(
        _expect(survivor, Survivor, "survivor")
        or _first_violation(survivor, SURVIVOR_RULES)
    )


def validate_hunt(hunt: Hunt) -> ValidationResult:
    return _result(
        _expect(hunt, Hunt, "hunt")
        or _first_violation(hunt, HUNT_RULES, HUNT_NESTED, HUNT_CHECKS)
    )


def validate_showdown(showdown: Showdown) -> ValidationResult:
    return _result(
        _expect(showdown, Showdown, "showdown")
        or _first_violation(showdown, SHOWDOWN_RULES, SHOWDOWN_NESTED, SHOWDOWN_CHECKS)
    )


def validate_monster_stats(stats: MonsterStats) -> ValidationResult:
    return _result(
        _expect(stats, MonsterStats, "monster")
        or _first_violation(stats, MONSTER_RULES)
    )


def _duplicate_id(items: list[Any], label: str) -> CampaignError | None:
    seen = set()
    for item in items:
        if item.id in seen:
            return BoundsError(f"Duplicate {label} ID: {item.id}.", field=f"{label}s")
        seen.add(item.id)
    return None


def _party_references(campaign: Campaign, activity: Hunt | Showdown, label: str) -> CampaignError | None:
    if campaign.get_settlement(activity.settlement_id) is None:
        return EntityNotFoundError(
            f"The {label} references an unknown settlement ({activity.settlement_id}).",
            field="settlement_id",
        )
    members = list(activity.survivors) + ([activity.scout] if activity.scout is not None else [])
    for survivor_id in members:
        if campaign.get_survivor(survivor_id) is None:
            return EntityNotFoundError(
                f"The {label} references an unknown survivor ({survivor_id}).",
                field="survivors",
            )
    return None


def validate_campaign(campaign: Campaign) -> ValidationResult:
    """
    Validate the whole aggregate: every entity, id uniqueness, cross references
    and the selected-id pointers.
    """
    error = _expect(campaign, Campaign, "campaign") or _apply_rules(campaign, CAMPAIGN_RULES)
    if error:
        return _result(error)

    for label, items, validator in (
        ("settlement", campaign.settlements, validate_settlement),
        ("survivor", campaign.survivors, validate_survivor),
        ("hunt", campaign.hunts, validate_hunt),
        ("showdown", campaign.showdowns, validate_showdown),
    ):
        for item in items:
            result = validator(item)
            if not result.valid:
                return result
        error = _duplicate_id(items, label)
        if error:
            return _result(error)

    for survivor in campaign.survivors:
        if campaign.get_settlement(survivor.settlement_id) is None:
            return _result(EntityNotFoundError(
                f"Survivor {survivor.id} belongs to an unknown settlement ({survivor.settlement_id}).",
                field="survivors",
            ))
    for hunt in campaign.hunts:
        error = _party_references(campaign, hunt, "hunt")
        if error:
            return _result(error)
    for showdown in campaign.showdowns:
        error = _party_references(campaign, showdown, "showdown")
        if error:
            return _result(error)

    for attr, lookup, label in (
        ("selected_settlement_id", campaign.get_settlement, "settlement"),
        ("selected_survivor_id", campaign.get_survivor, "survivor"),
        ("selected_hunt_id", campaign.get_hunt, "hunt"),
        ("selected_showdown_id", campaign.get_showdown, "showdown"),
    ):
        selected = getattr(campaign, attr)
        if selected is not None and lookup(selected) is None:
            return _result(EntityNotFoundError(
                f"The selected {label} ({selected}) does not exist.", field=attr
            ))

    return ValidationResult(True)


VALIDATORS: dict[str, Callable[[Any], ValidationResult]] = {
    "settlement": validate_settlement,
    "survivor": validate_survivor,
    "hunt": validate_hunt,
    "showdown": validate_showdown,
    "monster": validate_monster_stats,
    "campaign": validate_campaign,
}


def validate(kind: str, entity: Any) -> ValidationResult:
    """Validate `entity` as `kind` ("settlement", "survivor", "hunt", "showdown", "monster", "campaign")."""
    validator = VALIDATORS.get(kind)
    if validator is None:
        return ValidationResult(False, CampaignError(f"Unknown entity kind: {kind}"))
    return validator(entity)


# ===== Raw documents =====
# Persisted-layout shapes, checked before a document is parsed into dataclasses.
# A shape maps camelCase keys to (predicate, description), to a nested shape for an
# object, or to [shape] for a list of objects. Absent keys take their defaults.

Kind = tuple[Callable[[Any], bool], str]

INT: Kind = (_is_int, "a whole number")
OPT_INT: Kind = (_optional(_is_int), "a whole number or null")
BOOL: Kind = (_is_bool, "true or false")
TEXT: Kind = (_is_str, "text")
OPT_TEXT: Kind = (_optional(_is_str), "text or null")
TEXT_LIST: Kind = (_each(_is_str), "a list of text")
INT_LIST: Kind = (_each(_is_int), "a list of whole numbers")
BOARD: Kind = (
    lambda value: isinstance(value, dict) and all(
        _is_int_text(pos) and (label is None or _is_str(label)) for pos, label in value.items()
    ),
    "an object mapping board spaces to event labels",
)

AI_DECK_SHAPE = {name: INT for name in ("basic", "advanced", "legendary", "overtone")}

MONSTER_SHAPE = {
    "name": TEXT,
    **{stat: INT for stat in MONSTER_STAT_FIELDS},
    **{camel_key(f"{stat}_tokens"): INT for stat in MONSTER_STAT_FIELDS},
    "wounds": INT,
    "aiDeck": AI_DECK_SHAPE,
    "aiDeckRemaining": INT,
    "knockedDown": BOOL,
    "moods": TEXT_LIST,
    "traits": TEXT_LIST,
    "notes": TEXT,
}

SETTLEMENT_SHAPE = {
    "id": INT,
    "name": TEXT,
    "survivorType": TEXT,
    "usesScouts": BOOL,
    "campaignType": TEXT,
    "quarries": [{"name": TEXT, "node": TEXT, "unlocked": BOOL}],
    "nemeses": [{"name": TEXT, "unlocked": BOOL, "level1": BOOL, "level2": BOOL, "level3": BOOL}],
    "milestones": [{"name": TEXT, "event": TEXT, "complete": BOOL}],
    "principles": [{
        "name": TEXT,
        "option1Name": TEXT,
        "option1Selected": BOOL,
        "option2Name": TEXT,
        "option2Selected": BOOL,
    }],
    "resources": [{"name": TEXT, "category": TEXT, "types": TEXT_LIST, "amount": INT}],
    "timeline": [{"completed": BOOL, "entries": TEXT_LIST}],
}

SURVIVOR_SHAPE = {
    "id": INT,
    "settlementId": INT,
    "name": TEXT,
    "gender": TEXT,
    **{stat: INT for stat in (
        "accuracy", "evasion", "luck", "speed", "strength", "movement",
        "survival", "insanity", "huntXP", "courage", "understanding",
    )},
    "dead": BOOL,
    "retired": BOOL,
    "skipNextHunt": BOOL,
}

HUNT_DETAIL_SHAPE = {
    "id": INT,
    **{camel_key(name): INT for name in SURVIVOR_TOKEN_FIELDS},
    "notes": TEXT,
}

SHOWDOWN_DETAIL_SHAPE = {
    **HUNT_DETAIL_SHAPE,
    **{camel_key(name): INT for name in SHOWDOWN_COUNT_FIELDS},
    "knockedDown": BOOL,
    "priorityTarget": BOOL,
}

HUNT_SHAPE = {
    "id": INT,
    "settlementId": INT,
    "quarryName": TEXT,
    "quarryLevel": TEXT,
    "survivors": INT_LIST,
    "scout": OPT_INT,
    "survivorPosition": INT,
    "quarryPosition": INT,
    "ambush": BOOL,
    "status": TEXT,
    "outcome": OPT_TEXT,
    "huntBoard": BOARD,
    "survivorDetails": [HUNT_DETAIL_SHAPE],
    "monsters": [MONSTER_SHAPE],
}

SHOWDOWN_SHAPE = {
    "id": INT,
    "settlementId": INT,
    "monsterName": TEXT,
    "monsterLevel": TEXT,
    "monsterType": TEXT,
    "survivors": INT_LIST,
    "scout": OPT_INT,
    "ambush": TEXT,
    "turn": {
        "currentTurn": TEXT,
        "monsterState": {"aiCardDrawn": BOOL},
        "survivorStates": [{"id": INT, "activationUsed": BOOL, "movementUsed": BOOL}],
        "round": INT,
    },
    "status": TEXT,
    "outcome": OPT_TEXT,
    "survivorDetails": [SHOWDOWN_DETAIL_SHAPE],
    "monsters": [MONSTER_SHAPE],
}

CAMPAIGN_SHAPE = {
    "settlements": [SETTLEMENT_SHAPE],
    "survivors": [SURVIVOR_SHAPE],
    "hunts": [HUNT_SHAPE],
    "showdowns": [SHOWDOWN_SHAPE],
    "selectedSettlementId": OPT_INT,
    "selectedSurvivorId": OPT_INT,
    "selectedHuntId": OPT_INT,
    "selectedShowdownId": OPT_INT,
    "selectedTab": OPT_TEXT,
    "disableToasts": BOOL,
    # Older exports kept disableToasts under settings
    "settings": {"disableToasts": BOOL},
    "version": OPT_TEXT,
}


def _check_shape(data: dict[str, Any], shape: dict[str, Any], prefix: str = "") -> CampaignError | None:
    for key, kind in shape.items():
        if key not in data:
            continue
        value = data[key]
        path = f"{prefix}{key}"
        if isinstance(kind, dict):
            if not isinstance(value, dict):
                return BoundsError(f"{path} must be an object.", field=path)
            error = _check_shape(value, kind, f"{path}.")
            if error:
                return error
        elif isinstance(kind, list):
            if not isinstance(value, list):
                return BoundsError(f"{path} must be a list.", field=path)
            for index, member in enumerate(value):
                member_path = f"{path}[{index}]"
                if not isinstance(member, dict):
                    return BoundsError(f"{member_path} must be an object.", field=member_path)
                error = _check_shape(member, kind[0], f"{member_path}.")
                if error:
                    return error
        else:
            predicate, description = kind
            if not predicate(value):
                return BoundsError(f"{path} must be {description}.", field=path)
    return None


def validate_document(data: Any) -> ValidationResult:
    """
    Check the types of a raw campaign document (an export, or a camelCase patch)
    before it is parsed. Wrong types, fractional numbers and entries that are not
    objects fail here instead of being coerced to defaults.
    """
    if not isinstance(data, dict):
        return _result(CampaignError("The campaign document must be an object."))
    return _result(_check_shape(data, CAMPAIGN_SHAPE))


# ===== Reference data =====

def validate_monster_definition(data: Any) -> ValidationResult:
    """
    Validate one raw monster entry from reference data.
    Levels must be a single stat block, or a list of stat blocks when `multiMonster` is true.
    """
    if not isinstance(data, dict):
        return _result(CampaignError("Monster data must be an object."))
    name = data.get("name")
    if not _non_empty(name):
        return _result(EmptyNameError("Monster name is required.", field="name"))
    if data.get("type", MONSTER_TYPE_QUARRY) not in (MONSTER_TYPE_QUARRY, MONSTER_TYPE_NEMESIS):
        return _result(BoundsError(f"{name}: monster type must be quarry or nemesis.", field="type"))
    multi = data.get("multiMonster", False)
    if not isinstance(multi, bool):
        return _result(BoundsError(f"{name}: multiMonster must be true or false.", field="multiMonster"))

    levels = data.get("levels")
    if not isinstance(levels, dict) or not levels:
        return _result(BoundsError(f"{name}: at least one level is required.", field="levels"))
    for level, raw in levels.items():
        if str(level) not in MONSTER_LEVELS:
            return _result(BoundsError(f"{name}: unknown level {level}.", field="levels"))
        if multi:
            if not isinstance(raw, list) or not raw or not all(isinstance(x, dict) for x in raw):
                return _result(BoundsError(
                    f"{name}: level {level} must list one stat block per monster.",
                    field=f"levels.{level}",
                ))
            blocks = raw
        else:
            if not isinstance(raw, dict):
                return _result(BoundsError(
                    f"{name}: level {level} must be a single stat block.",
                    field=f"levels.{level}",
                ))
            blocks = [raw]
        for block in blocks:
            error = (
                _check_shape(block, MONSTER_SHAPE, prefix=f"levels.{level}.")
                or _apply_rules(MonsterStats.from_dict(block), MONSTER_LEVEL_RULES, prefix=f"levels.{level}.")
            )
            if error:
                return _result(error)

    board = data.get("huntBoard", {})
    if not isinstance(board, dict):
        return _result(BoundsError(f"{name}: huntBoard must be an object.", field="huntBoard"))
    for pos, label in board.items():
        try:
            position = int(pos)
        except (TypeError, ValueError):
            return _result(BoundsError(f"{name}: bad hunt board space {pos!r}.", field="huntBoard"))
        if label and (not _on_board(position) or position in FIXED_SPACES or label not in HUNT_EVENT_TYPES):
            return _result(BoundsError(
                f"{name}: hunt events may only mark spaces 1-5 and 7-11 as basic or monster.",
                field="huntBoard",
            ))
    return ValidationResult(True)
