"""Exception hierarchy for typefuzz."""


class TypeFuzzError(Exception):
    """Base class for all typefuzz errors."""


class ConfigurationError(TypeFuzzError):
    """Invalid campaign or generator parameters, raised before generation starts."""


class GenerationError(TypeFuzzError):
    """A term could not be generated or constructed."""


class TermSortError(GenerationError):
    """A term violates the arity or sort rules of its operator."""


class AdapterError(TypeFuzzError):
    """A solver backend failed (crash, malformed input, timeout).

    The fuzz driver records it as an ``error`` outcome and keeps going.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
