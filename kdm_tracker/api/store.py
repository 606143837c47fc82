"""
Campaign store backed by the database: one CampaignRecord row per storage key.
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from kdm_tracker.config import CAMPAIGN_STORAGE_KEY
from kdm_tracker.engine.errors import PersistenceError
from kdm_tracker.engine.store import CampaignStore

from .database import SessionLocal
from .models import CampaignRecord


class SqlCampaignStore(CampaignStore):
    """Reads and writes the campaign JSON in the `campaigns` table."""

    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        key: str = CAMPAIGN_STORAGE_KEY,
        version: str | None = None,
    ):
        super().__init__(version)
        self.session_factory = session_factory
        self.key = key

    def _load_raw(self) -> str | None:
        db: Session = self.session_factory()
        try:
            row = db.query(CampaignRecord).filter(CampaignRecord.key == self.key).first()
            return row.campaign if row else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not read the campaign: {e}") from e
        finally:
            db.close()

    def _save_raw(self, text: str) -> None:
        db: Session = self.session_factory()
        try:
            row = db.query(CampaignRecord).filter(CampaignRecord.key == self.key).first()
            if row:
                row.campaign = text
            else:
                db.add(CampaignRecord(key=self.key, campaign=text))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Could not save the campaign: {e}") from e
        finally:
            db.close()
