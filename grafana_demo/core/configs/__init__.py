from .api import APIConfiguration
from .chaos import ChaosConfiguration
from .log import LogConfiguration
from .observability import ObservabilityConfiguration

__all__ = [
    'APIConfiguration',
    'ChaosConfiguration',
    'LogConfiguration',
    'ObservabilityConfiguration',
]
