from importlib.metadata import PackageNotFoundError, version

from waterfall_analytics.errors import ConfigurationError, IndexOutOfRangeError
from waterfall_analytics.processor import AdvancedDataProcessor, create_advanced_data_processor
from waterfall_analytics.waterfall import (
    create_waterfall_sequence_analyzer,
    create_waterfall_tick_generator,
)

try:
    __version__ = version("waterfall-analytics")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

__all__ = [
    "AdvancedDataProcessor",
    "ConfigurationError",
    "IndexOutOfRangeError",
    "__version__",
    "create_advanced_data_processor",
    "create_waterfall_sequence_analyzer",
    "create_waterfall_tick_generator",
]
