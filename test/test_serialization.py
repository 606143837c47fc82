"""
JSON layout of the persisted campaign.
"""

import json

from kdm_tracker.engine.actions import (
    Action,
    begin_hunt,
    draw_ai_card,
    move_hunt,
    next_turn,
    start_showdown_from_hunt,
    update_hunt_survivor,
)
from kdm_tracker.engine.events import CampaignEvent
from kdm_tracker.engine.reducer import apply_action
from kdm_tracker.engine.state import Campaign, Milestone, Principle, Resource, TimelineYear
from kdm_tracker.engine.validation import validate_campaign

from helpers import MONSTER_DEFS, make_campaign


def busy_campaign() -> Campaign:
    """A campaign with a resolved hunt and a showdown in its survivors turn."""
    campaign = make_campaign()
    settlement = campaign.settlements[0]
    settlement.milestones = [Milestone("First child is born", "Principle: New Life")]
    settlement.principles = [Principle("Death", "Graves", "Cannibalize", option1_selected=True)]
    settlement.resources = [Resource("Monster Bone", "Basic", ["Bone"], 3)]
    settlement.timeline = [TimelineYear(True, ["Returning Survivors"]), TimelineYear()]
    for action in (
        begin_hunt(1, "White Lion", "1", [1, 2]),
        update_hunt_survivor(1, 1, {"insanity_tokens": 2}),
        move_hunt(1, 6, 6),
        start_showdown_from_hunt(1),
        draw_ai_card(1),
        next_turn(1),
    ):
        campaign, _ = apply_action(campaign, action, MONSTER_DEFS)
    return campaign


def test_round_trip_is_field_equal():
    campaign = busy_campaign()
    restored = Campaign.from_json(campaign.to_json())
    assert restored == campaign
    assert validate_campaign(restored).valid


def test_camel_case_keys():
    data = json.loads(busy_campaign().to_json())
    assert set(data) == {
        "settlements", "survivors", "hunts", "showdowns", "selectedSettlementId",
        "selectedSurvivorId", "selectedHuntId", "selectedShowdownId", "selectedTab",
        "disableToasts", "version",
    }
    hunt = data["hunts"][0]
    assert hunt["survivorPosition"] == 6
    assert hunt["huntBoard"]["1"] == "basic"
    assert hunt["survivorDetails"][0] == {
        "id": 1, "accuracyTokens": 0, "evasionTokens": 0, "insanityTokens": 2, "luckTokens": 0,
        "movementTokens": 0, "speedTokens": 0, "strengthTokens": 0, "survivalTokens": 0, "notes": "",
    }
    assert data["showdowns"][0]["turn"]["currentTurn"] == "survivors"
    assert data["survivors"][0]["huntXP"] == 0
    assert data["settlements"][0]["principles"][0]["option1Selected"] is True


def test_missing_fields_fall_back_to_defaults():
    campaign = Campaign.from_dict({
        "settlements": [{"id": 1, "name": "Old Save"}],
        "survivors": [{"id": 1, "settlementId": 1}],
        "hunts": None,
    })
    assert campaign.hunts == []
    assert campaign.survivors[0].movement == 5
    assert campaign.settlements[0].survivor_type == "Core"
    assert validate_campaign(campaign).valid


def test_legacy_settings_block():
    assert Campaign.from_dict({"settings": {"disableToasts": True}}).disable_toasts


def test_file_save_and_load(tmp_path):
    path = tmp_path / "campaign.json"
    campaign = busy_campaign()
    campaign.save(str(path))
    assert Campaign.load(str(path)) == campaign


def test_actions_and_events_serialize():
    action = begin_hunt(1, "White Lion", 2, [1])
    assert action.payload["quarry_level"] == "2"
    assert Action.from_dict(json.loads(json.dumps(action.to_dict()))) == action

    _, events = apply_action(make_campaign(), action, MONSTER_DEFS)
    event = events[0]
    assert CampaignEvent.from_dict(event.to_dict()) == event
