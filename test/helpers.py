"""
Builders shared by the test modules.
"""

from kdm_tracker.engine.definitions import load_monster_definitions
from kdm_tracker.engine.pipeline import CommitPipeline
from kdm_tracker.engine.state import Campaign, Settlement, SettlementQuarry, Survivor
from kdm_tracker.engine.store import InMemoryCampaignStore

MONSTER_DEFS = load_monster_definitions()


def make_settlement(settlement_id: int = 1, name: str = "Lantern Hoard", uses_scouts: bool = False) -> Settlement:
    return Settlement(
        id=settlement_id,
        name=name,
        uses_scouts=uses_scouts,
        quarries=[
            SettlementQuarry("White Lion", "NQ1", unlocked=True),
            SettlementQuarry("Flower Knight", "NQ2", unlocked=False),
        ],
    )


def make_survivors(count: int, settlement_id: int = 1, first_id: int = 1) -> list[Survivor]:
    return [
        Survivor(id=first_id + i, settlement_id=settlement_id, name=f"Survivor {first_id + i}")
        for i in range(count)
    ]


def make_campaign(survivor_count: int = 5, uses_scouts: bool = False) -> Campaign:
    """One settlement with `survivor_count` living survivors (ids 1..n)."""
    return Campaign(
        settlements=[make_settlement(uses_scouts=uses_scouts)],
        survivors=make_survivors(survivor_count),
        selected_settlement_id=1,
        version="test",
    )


def make_pipeline(campaign: Campaign | None = None, **kwargs) -> CommitPipeline:
    store = InMemoryCampaignStore(campaign if campaign is not None else make_campaign(), version="test")
    return CommitPipeline(store, MONSTER_DEFS, **kwargs)
