"""
Campaign stores: copies on read, shallow-merge commits, idempotence and atomic file writes.
"""

import json
import os

import pytest

from kdm_tracker.engine.errors import CampaignError, PersistenceError
from kdm_tracker.engine.state import Campaign
from kdm_tracker.engine.store import InMemoryCampaignStore, JsonFileCampaignStore, merge_patch

from helpers import make_campaign, make_settlement, make_survivors


def test_empty_store_reads_new_campaign():
    campaign = InMemoryCampaignStore(version="1.0").read()
    assert campaign.settlements == []
    assert campaign.selected_settlement_id is None
    assert campaign.version == "1.0"


def test_read_returns_copies():
    store = InMemoryCampaignStore(make_campaign())
    first = store.read()
    first.settlements[0].name = "Changed"
    assert store.read().settlements[0].name == "Lantern Hoard"


def test_committing_what_was_read_writes_nothing():
    store = InMemoryCampaignStore(make_campaign())
    store.commit(store.read())
    assert store.writes == 0
    store.commit({})
    assert store.writes == 0


def test_commit_replaces_whole_fields():
    store = InMemoryCampaignStore(make_campaign(3))
    committed = store.commit({"survivors": make_survivors(1)})
    assert [s.id for s in committed.survivors] == [1]
    assert store.read().settlements[0].name == "Lantern Hoard"
    assert store.writes == 1


def test_merge_patch_unknown_field():
    with pytest.raises(CampaignError):
        merge_patch(Campaign(), {"wizards": []})


def test_merge_patch_does_not_touch_input():
    campaign = make_campaign()
    merged = merge_patch(campaign, {"selected_settlement_id": None})
    assert campaign.selected_settlement_id == 1
    assert merged.selected_settlement_id is None


def test_dangling_selection_reads_as_absent():
    campaign = make_campaign()
    campaign.selected_survivor_id = 42
    store = InMemoryCampaignStore(campaign)
    assert store.read().selected_survivor_id is None


def test_file_store_round_trip(tmp_path):
    path = tmp_path / "campaign.json"
    store = JsonFileCampaignStore(path)
    assert store.read().settlements == []

    store.commit(make_campaign())
    assert json.loads(path.read_text())["settlements"][0]["name"] == "Lantern Hoard"
    assert JsonFileCampaignStore(path).read() == store.read()
    # no temporary files left behind
    assert os.listdir(tmp_path) == ["campaign.json"]


def test_file_store_unreadable_text_reads_empty(tmp_path):
    path = tmp_path / "campaign.json"
    path.write_text("{ not json")
    assert JsonFileCampaignStore(path).read().settlements == []


def test_failed_write_keeps_previous_campaign(tmp_path, monkeypatch):
    path = tmp_path / "campaign.json"
    store = JsonFileCampaignStore(path)
    store.commit(make_campaign())
    before = path.read_text()

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", broken_replace)
    with pytest.raises(PersistenceError):
        store.commit({"settlements": [make_settlement(name="New Hope")]})

    assert path.read_text() == before
    assert os.listdir(tmp_path) == ["campaign.json"]
