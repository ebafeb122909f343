"""
Engine exceptions
"""


class EngineError(Exception):
    """Base class for match engine failures"""


class NotFoundError(EngineError):
    """Unknown tournament, match or team reference"""


class IllegalStateError(EngineError):
    """Operation not allowed in the current match state"""
