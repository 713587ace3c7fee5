"""Exception types raised by the scoring library."""


class ExcitementError(Exception):
    """Base class for scoring errors."""


class InsufficientData(ExcitementError):
    """Too few probability samples to run the full algorithm."""

    reason = "insufficient_data"

    def __init__(self, sample_count: int, min_data_points: int):
        self.sample_count = sample_count
        self.min_data_points = min_data_points
        super().__init__(
            f"{sample_count} probability samples, need at least {min_data_points}"
        )


class NoDataError(InsufficientData):
    """The probability sequence was empty."""

    reason = "no_data"

    def __init__(self, min_data_points: int):
        super().__init__(0, min_data_points)


class ConfigError(ExcitementError):
    """An algorithm configuration failed validation at load time."""
