"""Exceptions raised by the outer layers of the lap analysis pipeline."""


class RaceAnalysisError(Exception):
    """Base exception for all race analysis errors."""


class TelemetryLoadError(RaceAnalysisError, ValueError):
    """Raised when a telemetry CSV cannot be read or holds no rows."""


class UnknownCircuitError(RaceAnalysisError, KeyError):
    """Raised when a circuit name is not present in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown circuit: {name}")

    def __str__(self) -> str:
        return self.args[0]
