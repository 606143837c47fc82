"""
Entity and campaign validation.
"""

from kdm_tracker.engine.errors import (
    BoundsError,
    CampaignError,
    EmptyNameError,
    EntityNotFoundError,
    PartySizeError,
    ScoutError,
)
from kdm_tracker.engine.state import (
    Hunt,
    Milestone,
    MonsterStats,
    Resource,
    Showdown,
    Survivor,
    SurvivorTurnState,
)
from kdm_tracker.engine.validation import (
    validate,
    validate_campaign,
    validate_document,
    validate_hunt,
    validate_monster_definition,
    validate_settlement,
    validate_showdown,
    validate_survivor,
)

from helpers import make_campaign, make_settlement


def make_hunt(**overrides) -> Hunt:
    values = dict(id=1, settlement_id=1, quarry_name="White Lion", quarry_level="1", survivors=[1, 2])
    values.update(overrides)
    return Hunt(**values)


def make_showdown(**overrides) -> Showdown:
    values = dict(
        id=1, settlement_id=1, monster_name="Butcher", monster_level="1",
        monster_type="nemesis", survivors=[1, 2],
    )
    values.update(overrides)
    return Showdown(**values)


# ===== Settlement =====

def test_settlement_valid():
    result = validate_settlement(make_settlement())
    assert result.valid
    assert result.error is None


def test_settlement_blank_name():
    settlement = make_settlement(name="   ")
    result = validate_settlement(settlement)
    assert not result.valid
    assert isinstance(result.error, EmptyNameError)
    assert result.field == "name"


def test_settlement_nested_milestone_needs_event():
    settlement = make_settlement()
    settlement.milestones = [Milestone(name="First child is born", event="")]
    result = validate_settlement(settlement)
    assert isinstance(result.error, EmptyNameError)
    assert result.field == "milestones[0].event"


def test_settlement_negative_resource():
    settlement = make_settlement()
    settlement.resources = [Resource(name="Bone", category="Basic", types=["Bone"], amount=-1)]
    result = validate_settlement(settlement)
    assert isinstance(result.error, BoundsError)


# ===== Survivor =====

def test_survivor_name_may_be_empty():
    assert validate_survivor(Survivor(id=1, settlement_id=1, name="")).valid


def test_survivor_hunt_xp_bounds():
    assert validate_survivor(Survivor(id=1, settlement_id=1, hunt_xp=16)).valid
    result = validate_survivor(Survivor(id=1, settlement_id=1, hunt_xp=17))
    assert isinstance(result.error, BoundsError)
    assert result.message == "Hunt XP must be between 0 and 16."


def test_survivor_movement_at_least_one():
    result = validate_survivor(Survivor(id=1, settlement_id=1, movement=0))
    assert isinstance(result.error, BoundsError)


def test_survivor_understanding_bounds():
    result = validate_survivor(Survivor(id=1, settlement_id=1, understanding=10))
    assert result.field == "understanding"


# ===== Hunt =====

def test_hunt_valid():
    assert validate_hunt(make_hunt()).valid


def test_hunt_empty_party():
    result = validate_hunt(make_hunt(survivors=[]))
    assert isinstance(result.error, PartySizeError)
    assert result.message == "At least one survivor must be selected for the hunt."


def test_hunt_party_of_five():
    result = validate_hunt(make_hunt(survivors=[1, 2, 3, 4, 5]))
    assert isinstance(result.error, PartySizeError)
    assert result.message == "No more than four survivors can embark on a hunt."


def test_hunt_position_off_board():
    result = validate_hunt(make_hunt(quarry_position=13))
    assert isinstance(result.error, BoundsError)
    assert result.field == "quarry_position"


def test_hunt_blank_quarry():
    result = validate_hunt(make_hunt(quarry_name=""))
    assert isinstance(result.error, EmptyNameError)


def test_hunt_scout_in_party():
    result = validate_hunt(make_hunt(scout=2))
    assert isinstance(result.error, ScoutError)


def test_hunt_event_on_fixed_space():
    result = validate_hunt(make_hunt(hunt_board={6: "basic"}))
    assert isinstance(result.error, BoundsError)


def test_hunt_monster_needs_name():
    result = validate_hunt(make_hunt(monsters=[MonsterStats(name="")]))
    assert isinstance(result.error, EmptyNameError)
    assert result.field == "monsters[0].name"


# ===== Showdown =====

def test_showdown_valid():
    assert validate_showdown(make_showdown()).valid


def test_showdown_negative_round():
    showdown = make_showdown()
    showdown.turn.round = -1
    result = validate_showdown(showdown)
    assert result.field == "turn.round"


def test_showdown_unknown_turn_owner():
    showdown = make_showdown()
    showdown.turn.current_turn = "nobody"
    assert isinstance(validate_showdown(showdown).error, BoundsError)


def test_showdown_turn_state_for_stranger():
    showdown = make_showdown()
    showdown.turn.survivor_states = [SurvivorTurnState(survivor_id=9)]
    assert isinstance(validate_showdown(showdown).error, EntityNotFoundError)


# ===== Campaign =====

def test_campaign_valid():
    assert validate_campaign(make_campaign()).valid


def test_campaign_duplicate_survivor_ids():
    campaign = make_campaign(2)
    campaign.survivors[1].id = 1
    result = validate_campaign(campaign)
    assert isinstance(result.error, BoundsError)


def test_campaign_survivor_of_unknown_settlement():
    campaign = make_campaign(1)
    campaign.survivors[0].settlement_id = 7
    assert isinstance(validate_campaign(campaign).error, EntityNotFoundError)


def test_campaign_hunt_with_unknown_survivor():
    campaign = make_campaign(2)
    campaign.hunts = [make_hunt(survivors=[1, 9])]
    result = validate_campaign(campaign)
    assert isinstance(result.error, EntityNotFoundError)


def test_campaign_dangling_selection():
    campaign = make_campaign()
    campaign.selected_hunt_id = 4
    result = validate_campaign(campaign)
    assert isinstance(result.error, EntityNotFoundError)
    assert result.field == "selected_hunt_id"


def test_campaign_field_types():
    campaign = make_campaign()
    campaign.hunts = None
    result = validate_campaign(campaign)
    assert isinstance(result.error, BoundsError)
    assert result.field == "hunts"

    campaign = make_campaign()
    campaign.disable_toasts = "yes"
    assert validate_campaign(campaign).field == "disable_toasts"

    campaign = make_campaign()
    campaign.selected_survivor_id = "2"
    assert isinstance(validate_campaign(campaign).error, BoundsError)


def test_raw_document_types():
    document = make_campaign().to_dict()
    assert validate_document(document).valid
    assert validate_document({}).valid

    document["hunts"] = [{"id": 1, "survivors": [1, "2"]}]
    result = validate_document(document)
    assert isinstance(result.error, BoundsError)
    assert result.field == "hunts[0].survivors"

    result = validate_document({"showdowns": [{"turn": {"round": 1.5}}]})
    assert result.field == "showdowns[0].turn.round"
    assert result.message == "showdowns[0].turn.round must be a whole number."

    assert validate_document({"settings": {"disableToasts": 1}}).field == "settings.disableToasts"
    assert not validate_document(["not", "a", "campaign"]).valid


def test_validate_by_kind():
    assert validate("survivor", Survivor(id=1, settlement_id=1)).valid
    assert not validate("survivor", make_settlement()).valid
    result = validate("spaceship", object())
    assert isinstance(result.error, CampaignError)


def test_result_to_dict():
    result = validate_hunt(make_hunt(survivors=[]))
    assert result.to_dict() == {
        "valid": False,
        "error": {
            "kind": "party_size",
            "message": "At least one survivor must be selected for the hunt.",
            "field": "survivors",
        },
    }


# ===== Monster reference data =====

def test_monster_definition_single_vs_multi_shape():
    single = {"name": "Lion", "type": "quarry", "levels": {"1": {"movement": 6}}}
    assert validate_monster_definition(single).valid

    wrong_shape = {"name": "Witches", "type": "nemesis", "multiMonster": True, "levels": {"1": {"movement": 6}}}
    assert isinstance(validate_monster_definition(wrong_shape).error, BoundsError)

    list_for_single = {"name": "Lion", "levels": {"1": [{"movement": 6}]}}
    assert isinstance(validate_monster_definition(list_for_single).error, BoundsError)


def test_monster_definition_unknown_level():
    data = {"name": "Lion", "levels": {"5": {"movement": 6}}}
    assert isinstance(validate_monster_definition(data).error, BoundsError)


def test_monster_definition_needs_name():
    assert isinstance(validate_monster_definition({"levels": {}}).error, EmptyNameError)


def test_monster_definition_mistyped_stats():
    data = {"name": "Bad", "levels": {"1": {"accuracy": "lots", "toughness": "x"}}}
    result = validate_monster_definition(data)
    assert isinstance(result.error, BoundsError)
    assert result.field == "levels.1.accuracy"

    data = {"name": "Bad", "levels": {"1": {"aiDeck": {"basic": 2.5}}}}
    assert validate_monster_definition(data).field == "levels.1.aiDeck.basic"
