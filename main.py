"""
Main entry point for the campaign tracker engine.
Demonstrates core functionality with a short scripted hunt and showdown.
"""

from kdm_tracker.config import CAMPAIGN_VERSION
from kdm_tracker.engine.actions import (
    begin_hunt,
    draw_ai_card,
    end_showdown,
    mark_survivor_action,
    move_hunt,
    next_turn,
    start_showdown_from_hunt,
)
from kdm_tracker.engine.definitions import load_monster_definitions
from kdm_tracker.engine.pipeline import CommitPipeline, CommitResult
from kdm_tracker.engine.queries import get_showdown_summary
from kdm_tracker.engine.state import Settlement, SettlementQuarry, Survivor
from kdm_tracker.engine.store import InMemoryCampaignStore
from kdm_tracker.engine.utils import print_campaign


def report(result: CommitResult) -> None:
    if result.ok:
        print(f"✓ {result.message}")
        print(f"  Events: {[e.type for e in result.events]}")
    else:
        print(f"✗ {result.message}")


def main():
    print("KDM Tracker - Campaign Engine")
    print("=" * 60)

    monster_defs = load_monster_definitions()
    pipeline = CommitPipeline(InMemoryCampaignStore(version=CAMPAIGN_VERSION), monster_defs)

    # ===== Settlement and survivors =====
    print("\n[SETUP]")
    settlement = Settlement(
        id=1,
        name="Lantern Hoard",
        quarries=[SettlementQuarry("White Lion", "NQ1", unlocked=True)],
    )
    survivors = [
        Survivor(id=1, settlement_id=1, name="Allister", gender="M"),
        Survivor(id=2, settlement_id=1, name="Erza"),
        Survivor(id=3, settlement_id=1, name="Lucy"),
        Survivor(id=4, settlement_id=1, name="Zachary", gender="M"),
        Survivor(id=5, settlement_id=1, name="Ezra", gender="M"),
    ]
    report(pipeline.save(
        {"settlements": [settlement], "survivors": survivors, "selected_settlement_id": 1},
        "Settlement founded!",
    ))

    # ===== SCENARIO 1: Party too large =====
    print("\n[SCENARIO 1: Five survivors cannot depart]")
    report(pipeline.dispatch(begin_hunt(1, "White Lion", "1", [1, 2, 3, 4, 5])))

    # ===== SCENARIO 2: Hunt =====
    print("\n[SCENARIO 2: Hunt the White Lion]")
    report(pipeline.dispatch(begin_hunt(1, "White Lion", "1", [1, 2, 3, 4])))
    hunt = pipeline.read().get_hunt(1)
    print(f"Survivors on {hunt.survivor_position}, quarry on {hunt.quarry_position}")

    for survivor_position, quarry_position in ((2, 6), (4, 6), (4, 5), (5, 5)):
        report(pipeline.dispatch(move_hunt(1, survivor_position, quarry_position)))
    hunt = pipeline.read().get_hunt(1)
    print(f"Hunt status: {hunt.status}, outcome: {hunt.outcome}")

    # ===== SCENARIO 3: Showdown =====
    print("\n[SCENARIO 3: Showdown]")
    report(pipeline.dispatch(start_showdown_from_hunt(1)))

    report(pipeline.dispatch(mark_survivor_action(1, 1, activation_used=True)))  # wrong turn
    report(pipeline.dispatch(draw_ai_card(1)))
    report(pipeline.dispatch(next_turn(1)))
    for survivor_id in (1, 2, 3, 4):
        report(pipeline.dispatch(
            mark_survivor_action(1, survivor_id, activation_used=True, movement_used=True)
        ))
    report(pipeline.dispatch(next_turn(1)))
    print(f"Summary: {get_showdown_summary(pipeline.read(), 1)}")

    report(pipeline.dispatch(end_showdown(1, "victory")))

    print("\n[FINAL CAMPAIGN]")
    print_campaign(pipeline.read(), verbose=True)


if __name__ == "__main__":
    main()
