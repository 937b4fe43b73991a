"""Exception types raised by liftplan."""


class LiftplanError(Exception):
    """Base class for all liftplan errors."""


class InvalidSetGroupError(LiftplanError, ValueError):
    """A set-group specification cannot be expanded.

    Carries every validation reason so a caller can show them all at once.
    """

    def __init__(self, reasons: list[str]):
        self.reasons = list(reasons)
        super().__init__("; ".join(self.reasons) or "Invalid set group")


class ProgressionActiveError(LiftplanError):
    """An individual set edit was attempted while a progression rule is active."""


class SyncContractError(LiftplanError, ValueError):
    """Both weight and intensity were reported as the focused field."""


class SnapshotIndexError(LiftplanError, IndexError):
    """A snapshot index is outside the stored history."""


class MalformedPlanError(LiftplanError, ValueError):
    """Plan data is missing a required key or has an invalid value."""
