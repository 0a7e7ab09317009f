from fantasy_ingest.services.ingestion.entity_resolver import EntityResolver, Resolution, ResolutionKind
from fantasy_ingest.services.ingestion.game_catalog import GameCatalogFetcher
from fantasy_ingest.services.ingestion.pipeline import IngestionPipeline
from fantasy_ingest.services.ingestion.poller import Poller
from fantasy_ingest.services.ingestion.repository import IngestionRepository

__all__ = [
    "EntityResolver",
    "Resolution",
    "ResolutionKind",
    "GameCatalogFetcher",
    "IngestionPipeline",
    "Poller",
    "IngestionRepository",
]
