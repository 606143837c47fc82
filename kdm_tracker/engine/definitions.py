"""
Static reference data for monsters.
All monster data lives in data/monsters.json. Each monster declares `multiMonster`;
every level is then either one stat block (single) or a list of stat blocks, one per
monster instance on the board (multi). The engine reads these, it never mutates them.
"""

import json
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path

from kdm_tracker.engine.errors import CampaignError, EntityNotFoundError
from kdm_tracker.engine.state import MonsterStats, MONSTER_TYPE_QUARRY, _int
from kdm_tracker.engine.validation import validate_monster_definition

DATA_DIR = Path(__file__).parent.parent / "data"
MONSTERS_FILE = DATA_DIR / "monsters.json"


@dataclass
class SingleMonster:
    """Level data for an encounter with one monster."""
    stats: MonsterStats
    kind: str = field(default="single", init=False)

    def instances(self) -> list[MonsterStats]:
        return [self.stats]


@dataclass
class MultiMonster:
    """Level data for an encounter with several monsters (one stat block each)."""
    monsters: list[MonsterStats]
    kind: str = field(default="multi", init=False)

    def instances(self) -> list[MonsterStats]:
        return list(self.monsters)


MonsterInstanceData = SingleMonster | MultiMonster


@dataclass
class MonsterDefinition:
    """A quarry or nemesis from the reference data."""
    name: str
    monster_type: str
    node: str
    multi_monster: bool
    levels: dict[str, MonsterInstanceData]
    hunt_board: dict[int, str] = field(default_factory=dict)

    def available_levels(self) -> list[str]:
        return sorted(self.levels)

    def instances_for(self, level: str) -> list[MonsterStats]:
        """
        Fresh stat blocks for a hunt or showdown at `level`.
        Unnamed stat blocks take the monster's own name.
        """
        data = self.levels.get(str(level))
        if data is None:
            raise EntityNotFoundError(
                f"{self.name} has no level {level} data.", field="level"
            )
        out = []
        for stats in data.instances():
            copy = deepcopy(stats)
            if not copy.name:
                copy.name = self.name
            out.append(copy)
        return out


def instance_data_from_dict(raw, multi_monster: bool) -> MonsterInstanceData:
    """Build the tagged level variant. Shape must already match `multi_monster`."""
    if multi_monster:
        return MultiMonster([MonsterStats.from_dict(m) for m in raw])
    return SingleMonster(MonsterStats.from_dict(raw))


def definition_from_dict(data: dict) -> MonsterDefinition:
    """Parse and validate one monster entry. Raises the first violated rule."""
    result = validate_monster_definition(data)
    if not result.valid:
        raise result.error
    multi = bool(data.get("multiMonster", False))
    levels_raw = data.get("levels") or {}
    board_raw = data.get("huntBoard") or {}
    return MonsterDefinition(
        name=str(data["name"]),
        monster_type=str(data.get("type") or MONSTER_TYPE_QUARRY),
        node=str(data.get("node") or ""),
        multi_monster=multi,
        levels={str(level): instance_data_from_dict(raw, multi) for level, raw in levels_raw.items()},
        hunt_board={_int(pos, -1): str(label) for pos, label in board_raw.items() if label},
    )


def load_monster_definitions(path: Path | str | None = None) -> dict[str, MonsterDefinition]:
    """Load monster definitions keyed by name. Defaults to data/monsters.json."""
    monsters_path = Path(path) if path is not None else MONSTERS_FILE
    if not monsters_path.exists():
        raise FileNotFoundError(f"Monster data not found: {monsters_path}")
    with open(monsters_path, "r") as f:
        raw = json.load(f)
    entries = raw.get("monsters", []) if isinstance(raw, dict) else raw
    if not isinstance(entries, list):
        raise CampaignError(f"Monster data must be a list: {monsters_path}")
    defs = {}
    for entry in entries:
        definition = definition_from_dict(entry)
        defs[definition.name] = definition
    return defs


def get_monster_definition(
    monster_defs: dict[str, MonsterDefinition] | None,
    name: str,
) -> MonsterDefinition | None:
    if not monster_defs:
        return None
    return monster_defs.get(name)


def list_monsters(
    monster_defs: dict[str, MonsterDefinition],
    monster_type: str | None = None,
) -> list[MonsterDefinition]:
    """Definitions sorted by name, optionally filtered to quarries or nemeses."""
    return sorted(
        (d for d in monster_defs.values() if monster_type is None or d.monster_type == monster_type),
        key=lambda d: d.name,
    )
