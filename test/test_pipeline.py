"""
Commit pipeline: every change goes read -> merge -> validate -> persist -> notify.
"""

import json

from kdm_tracker.engine.actions import Action, begin_hunt, move_hunt
from kdm_tracker.engine.errors import (
    BoundsError,
    CampaignError,
    EntityNotFoundError,
    PartySizeError,
    PersistenceError,
)
from kdm_tracker.engine.events import CAMPAIGN_IMPORTED_MESSAGE, CAMPAIGN_SAVED_MESSAGE
from kdm_tracker.engine.state import Survivor

from helpers import make_campaign, make_pipeline


def test_party_of_five_changes_nothing(pipeline):
    before = pipeline.read()
    result = pipeline.dispatch(begin_hunt(1, "White Lion", "1", [1, 2, 3, 4, 5]))
    assert not result.ok
    assert isinstance(result.error, PartySizeError)
    assert result.message == "No more than four survivors can embark on a hunt."
    assert pipeline.read().hunts == []
    assert pipeline.read() == before
    assert pipeline.store.writes == 0


def test_dispatch_persists_and_reports(pipeline):
    result = pipeline.dispatch(begin_hunt(1, "White Lion", "1", [1, 2]))
    assert result.ok
    assert result.message == "The hunt for White Lion begins. Survivors venture into the darkness."
    assert [e.type for e in result.events] == ["hunt_started"]
    assert pipeline.read().get_hunt(1).survivors == [1, 2]
    assert pipeline.read().selected_hunt_id == 1


def test_dispatch_joins_event_messages(pipeline):
    pipeline.dispatch(begin_hunt(1, "White Lion", "1", [1]))
    result = pipeline.dispatch(move_hunt(1, 6, 6))
    assert result.message == "Survivors moved. The survivors find their quarry. The showdown awaits."


def test_save_patch_with_typed_values(pipeline):
    survivors = pipeline.read().survivors + [Survivor(id=6, settlement_id=1, name="Aya")]
    result = pipeline.save({"survivors": survivors}, "Survivor created!")
    assert result.ok
    assert result.message == "Survivor created!"
    assert pipeline.read().get_survivor(6).name == "Aya"


def test_save_patch_with_persisted_keys(pipeline):
    result = pipeline.save({"selectedTab": "timeline", "selectedSurvivorId": 2})
    assert result.ok
    assert result.message == CAMPAIGN_SAVED_MESSAGE
    campaign = pipeline.read()
    assert campaign.selected_tab == "timeline"
    assert campaign.selected_survivor_id == 2


def test_save_rejects_invalid_entities(pipeline):
    survivors = pipeline.read().survivors
    survivors[0].hunt_xp = 20
    result = pipeline.save({"survivors": survivors})
    assert not result.ok
    assert result.message == "Hunt XP must be between 0 and 16."
    assert pipeline.read().survivors[0].hunt_xp == 0


def test_save_rejects_dangling_selection(pipeline):
    result = pipeline.save({"selected_hunt_id": 8})
    assert isinstance(result.error, EntityNotFoundError)


def test_save_rejects_unknown_field(pipeline):
    result = pipeline.save({"wizards": []})
    assert not result.ok
    assert result.error.field == "wizards"


def test_disabled_toasts_silence_success_only():
    campaign = make_campaign()
    campaign.disable_toasts = True
    pipeline = make_pipeline(campaign)

    ok = pipeline.save({"selectedTab": "survivors"}, "Saved!")
    assert ok.ok
    assert ok.message is None

    failed = pipeline.dispatch(begin_hunt(1, "White Lion", "1", []))
    assert not failed.ok
    assert failed.message == "At least one survivor must be selected for the hunt."


def test_subscribers_see_every_result(pipeline):
    seen = []
    unsubscribe = pipeline.subscribe(seen.append)
    pipeline.dispatch(begin_hunt(1, "White Lion", "1", [1]))
    pipeline.dispatch(begin_hunt(1, "White Lion", "1", [2]))
    assert [r.ok for r in seen] == [True, False]

    unsubscribe()
    pipeline.save({"selectedTab": "hunt"})
    assert len(seen) == 2


def test_persistence_failure_is_reported(pipeline, monkeypatch):
    def broken_save(text):
        raise OSError("read-only file system")

    monkeypatch.setattr(pipeline.store, "_save_raw", broken_save)
    result = pipeline.dispatch(begin_hunt(1, "White Lion", "1", [1]))
    assert not result.ok
    assert isinstance(result.error, PersistenceError)
    assert pipeline.read().hunts == []


def test_export_then_import_restores_campaign(tmp_path):
    source = make_pipeline()
    source.dispatch(begin_hunt(1, "White Lion", "1", [1, 2]))
    path = tmp_path / "backup.json"
    text = source.export_campaign(path)
    assert path.read_text() == text

    target = make_pipeline(make_campaign(0))
    result = target.import_campaign(text)
    assert result.ok
    assert result.message == CAMPAIGN_IMPORTED_MESSAGE
    assert result.events[0].payload == {"settlements": 1, "survivors": 5, "hunts": 1, "showdowns": 0}
    assert target.read() == source.read()


def test_import_invalid_document_changes_nothing(pipeline):
    data = json.loads(pipeline.export_campaign())
    data["survivors"][0]["huntXP"] = 99
    result = pipeline.import_campaign(data)
    assert not result.ok
    assert pipeline.read().survivors[0].hunt_xp == 0


def test_import_unreadable_text(pipeline):
    result = pipeline.import_campaign("{ nope")
    assert isinstance(result.error, PersistenceError)
    result = pipeline.import_campaign("[1, 2]")
    assert isinstance(result.error, PersistenceError)


def test_import_clears_dangling_selection(pipeline):
    data = json.loads(pipeline.export_campaign())
    data["selectedShowdownId"] = 5
    result = pipeline.import_campaign(data)
    assert result.ok
    assert pipeline.read().selected_showdown_id is None


def test_import_rejects_mistyped_values(pipeline):
    before = pipeline.read()
    exported = json.loads(pipeline.export_campaign())
    cases = [
        ("survivors", 0, "strength", "not a number", "survivors[0].strength"),
        ("survivors", 0, "huntXP", 3.9, "survivors[0].huntXP"),
        ("settlements", 0, "usesScouts", "yes", "settlements[0].usesScouts"),
    ]
    for collection, index, key, value, field_path in cases:
        data = json.loads(json.dumps(exported))
        data[collection][index][key] = value
        result = pipeline.import_campaign(data)
        assert not result.ok
        assert isinstance(result.error, BoundsError)
        assert result.error.field == field_path

    data = json.loads(json.dumps(exported))
    data["settlements"].append("garbage entry")
    result = pipeline.import_campaign(data)
    assert isinstance(result.error, BoundsError)
    assert result.error.field == "settlements[1]"

    assert pipeline.read() == before
    assert pipeline.store.writes == 0


def test_save_rejects_collection_that_is_not_a_list(pipeline):
    result = pipeline.save({"hunts": None})
    assert not result.ok
    assert isinstance(result.error, BoundsError)
    assert result.error.field == "hunts"
    assert pipeline.read().hunts == []


def test_save_rejects_mistyped_scalars(pipeline):
    result = pipeline.save({"selectedHuntId": "abc"})
    assert isinstance(result.error, BoundsError)
    assert result.error.field == "selectedHuntId"

    result = pipeline.save({"disable_toasts": "yes"})
    assert isinstance(result.error, BoundsError)
    assert result.error.field == "disable_toasts"

    campaign = pipeline.read()
    assert campaign.disable_toasts is False
    assert campaign.selected_settlement_id == 1
    assert pipeline.store.writes == 0


def test_unreadable_store_is_reported(pipeline, monkeypatch):
    def broken_load():
        raise PersistenceError("Could not read the campaign: disk unplugged")

    monkeypatch.setattr(pipeline.store, "_load_raw", broken_load)
    results = [
        pipeline.save({"selectedTab": "hunt"}),
        pipeline.dispatch(begin_hunt(1, "White Lion", "1", [1])),
        pipeline.import_campaign({"settlements": []}),
    ]
    for result in results:
        assert not result.ok
        assert isinstance(result.error, PersistenceError)
        assert result.message == "Could not read the campaign: disk unplugged"
        assert result.campaign.settlements == []
    assert pipeline.store.writes == 0


def test_action_missing_payload_key(pipeline):
    pipeline.dispatch(begin_hunt(1, "White Lion", "1", [1]))
    result = pipeline.dispatch(Action(type="resolve_hunt", payload={"hunt_id": 1}))
    assert not result.ok
    assert isinstance(result.error, CampaignError)
    assert result.error.field == "outcome"
    assert result.message == "Action 'resolve_hunt' is missing outcome."
    assert pipeline.read().hunts[0].is_active

    result = pipeline.dispatch(Action(type="set_hunt_event", payload={"hunt_id": 1}))
    assert result.error.field == "position"
