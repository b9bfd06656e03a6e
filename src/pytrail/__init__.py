"""pytrail - Rolling, disk-backed position history for game-server players."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pytrail")
except PackageNotFoundError:
    __version__ = "0+local"
from pytrail.config import TrailConfig
from pytrail.exceptions import (
    TrailConfigError,
    TrailError,
    TrailStorageError,
    TrailTransportError,
)
from pytrail.models import (
    CompactCharacter,
    CompactDutyPlayer,
    CompactPlayer,
    CompactVehicle,
    DayMap,
    OnDutyPlayer,
    Sample,
)
from pytrail.poller import poll_once, run_poller
from pytrail.state import (
    HistoryRepository,
    HistoryStore,
    InMemoryHistoryRepository,
    JsonFileHistoryRepository,
)

__all__ = [
    "__version__",
    "CompactCharacter",
    "CompactDutyPlayer",
    "CompactPlayer",
    "CompactVehicle",
    "DayMap",
    "HistoryRepository",
    "HistoryStore",
    "InMemoryHistoryRepository",
    "JsonFileHistoryRepository",
    "OnDutyPlayer",
    "Sample",
    "TrailConfig",
    "TrailConfigError",
    "TrailError",
    "TrailStorageError",
    "TrailTransportError",
    "poll_once",
    "run_poller",
]
