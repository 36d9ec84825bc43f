class SimulatedFailure(Exception):
    """Base class for failures injected by the chaos toggles."""


class BusinessLogicError(SimulatedFailure):
    pass


class DatabaseTimeoutError(SimulatedFailure):
    pass
