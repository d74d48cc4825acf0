class DitherError(ValueError):
    """Base class for every failure raised by the dithering core."""


class InvalidParameter(DitherError):
    """Level count below 2, or a malformed kernel / threshold matrix."""


class UnknownMode(DitherError):
    """Requested mode name is not in the registry."""

    def __init__(self, name: str):
        super().__init__(f"Unknown dithering mode: {name!r}")
        self.name = name


class DimensionMismatch(DitherError):
    """Buffer dimensions are non-positive or disagree with the sample store."""
