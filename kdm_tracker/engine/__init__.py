"""
Campaign State Engine
Validated campaign data model, hunt board movement and showdown turn order.
No web framework, database, or UI here.
"""

# Hunt board: spaces 0..12
BOARD_SPACES = 13
START_SPACE = 0
DARKNESS_SPACE = 6
STARVATION_SPACE = 12

DEFAULT_SURVIVOR_POSITION = START_SPACE
DEFAULT_QUARRY_POSITION = DARKNESS_SPACE

# Party bounds for hunts and showdowns (inclusive)
MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 4

MONSTER_LEVELS = ("1", "2", "3", "4")
