"""
Single place for default campaign configuration.
Change DEFAULT_CAMPAIGN_FILE to move where the local JSON store and backups live.
"""
import os

# Local JSON file used by the file store and the backup script (override with KDM_CAMPAIGN_FILE)
DEFAULT_CAMPAIGN_FILE = os.environ.get(
    "KDM_CAMPAIGN_FILE",
    os.path.join(os.path.expanduser("~"), ".kdm_tracker", "campaign.json"),
)
# Key under which the single campaign document is stored
CAMPAIGN_STORAGE_KEY = "campaign"
# Stamped on new campaigns and exports
CAMPAIGN_VERSION = "0.12.0"
