from typing import Optional


class DeserializationError(Exception):
    pass


class UnsupportedVersionError(DeserializationError):
    def __init__(self, version: int):
        super().__init__("Unknown version: {}".format(version))
        self.version = version


class UnsupportedLeafTypeError(DeserializationError):
    def __init__(self, leaf_type: int):
        super().__init__("Unknown leaf type: {}".format(leaf_type))
        self.leaf_type = leaf_type


class UnknownEntryTypeError(DeserializationError):
    def __init__(self, entry_type: int):
        super().__init__("Unknown entry type: {}".format(entry_type))
        self.entry_type = entry_type


class UnknownAlgorithmError(DeserializationError):
    def __init__(self, kind: str, value: int):
        super().__init__("Unknown {} algorithm: {:x}".format(kind, value))
        self.kind = kind
        self.value = value


class TruncatedInputError(DeserializationError):
    def __init__(self, message: str, expected: int, actual: int):
        super().__init__("{}: Expected {}, got {}.".format(message, expected, actual))
        self.expected = expected
        self.actual = actual

    @property
    def shortfall(self) -> int:
        return self.expected - self.actual


class CorruptDataError(DeserializationError):
    def __init__(self, message: str, expected: Optional[int] = None, actual: Optional[int] = None):
        if expected is not None:
            message = "{} (declared {}, found {})".format(message, expected, actual)
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class InvalidArgumentError(ValueError):
    """Raised for caller mistakes, never for malformed input data."""
    pass


class SerializationError(Exception):
    pass
