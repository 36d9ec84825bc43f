from .delays import DelayRange, DelaySampler, UniformDelaySampler
from .errors import BusinessLogicError, DatabaseTimeoutError, SimulatedFailure
from .stages import SimulatedPipeline

__all__ = [
    'BusinessLogicError',
    'DatabaseTimeoutError',
    'DelayRange',
    'DelaySampler',
    'SimulatedFailure',
    'SimulatedPipeline',
    'UniformDelaySampler',
]
