"""GPS track ingestion and cleaning.

Public API
----------
TrackPoint      - single timestamped GPS fix
TrackIngestor   - GPX bytes → ordered TrackPoint list
TrackCleaner    - elevation smoothing, spike rejection, privacy trim
CleanerConfig   - tunable cleaning constants
"""

from route_animator.track.cleaner import CleanerConfig, TrackCleaner
from route_animator.track.ingest import TrackIngestor
from route_animator.track.models import TrackPoint

__all__ = ["CleanerConfig", "TrackCleaner", "TrackIngestor", "TrackPoint"]
