"""
Error taxonomy for the campaign engine.
Every error subclasses ValueError so existing `except ValueError` handlers keep working.
"""


class CampaignError(ValueError):
    """Base error. `field` names the offending field when there is one."""

    kind = "campaign_error"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "field": self.field}


class EmptyNameError(CampaignError):
    kind = "empty_name"


class BoundsError(CampaignError):
    """Numeric value or board position out of range."""
    kind = "bounds"


class PartySizeError(CampaignError):
    kind = "party_size"


class EntityNotFoundError(CampaignError):
    kind = "entity_not_found"


class PersistenceError(CampaignError):
    kind = "persistence"


class ScoutError(CampaignError):
    kind = "scout"


class IllegalTransitionError(CampaignError):
    """Hunt or showdown asked to do something its current state does not allow."""
    kind = "illegal_transition"


class TurnOrderError(IllegalTransitionError):
    kind = "turn_order"
