"""
Circuit Registry for Race Telemetry Lap Analysis

This module defines the known circuits (center point, start/finish line,
display zoom) and the read-only registry that circuit and lap detection
look them up in.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, Tuple
from .exceptions import UnknownCircuitError
from .geometry import GeoPoint


@dataclass(frozen=True)
class Circuit:
    """A known circuit with its start/finish line segment."""

    name: str
    center: GeoPoint
    start_finish: Tuple[GeoPoint, GeoPoint]
    zoom: int = 15

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "center": list(self.center),
            "start_finish": [list(self.start_finish[0]), list(self.start_finish[1])],
            "zoom": self.zoom,
        }


def _circuit(name: str, lat: float, lon: float, zoom: int = 15) -> Circuit:
    # Start/finish line runs from the center point ~40 m to the north-west
    return Circuit(
        name=name,
        center=GeoPoint(lat, lon),
        start_finish=(GeoPoint(lat, lon), GeoPoint(lat + 0.0003, lon - 0.0003)),
        zoom=zoom,
    )


DEFAULT_CIRCUITS = (
    _circuit("Road America", 43.8002, -87.9897),
    _circuit("Laguna Seca", 36.5844, -121.7536),
    _circuit("Circuit of the Americas", 30.1328, -97.6411),
    _circuit("Watkins Glen", 42.3369, -76.9270),
    _circuit("Sebring International Raceway", 27.4642, -81.3489),
    _circuit("Daytona International Speedway", 29.1846, -81.0717),
    _circuit("VIRginia International Raceway", 36.5533, -79.2014),
)


class CircuitRegistry:
    """
    Immutable lookup table of circuits keyed by name.

    Iteration follows construction order, which is also the tie-break order
    for circuit detection.
    """

    def __init__(self, circuits: Iterable[Circuit] = ()):
        table: Dict[str, Circuit] = {}
        for circuit in circuits:
            if circuit.name in table:
                raise ValueError(f"Duplicate circuit name: {circuit.name}")
            table[circuit.name] = circuit
        self._circuits = table

    def __getitem__(self, name: str) -> Circuit:
        try:
            return self._circuits[name]
        except KeyError:
            raise UnknownCircuitError(name) from None

    def __contains__(self, name) -> bool:
        return name in self._circuits

    def __iter__(self) -> Iterator[Circuit]:
        return iter(self._circuits.values())

    def __len__(self) -> int:
        return len(self._circuits)

    def __repr__(self) -> str:
        return f"CircuitRegistry({list(self._circuits)!r})"

    def get(self, name: Optional[str]) -> Optional[Circuit]:
        """Return the circuit called name, or None if unknown or name is None."""
        if name is None:
            return None
        return self._circuits.get(name)

    def names(self) -> Tuple[str, ...]:
        return tuple(self._circuits)


_DEFAULT_REGISTRY = CircuitRegistry(DEFAULT_CIRCUITS)


def default_registry() -> CircuitRegistry:
    """Return the shared registry of built-in circuits."""
    return _DEFAULT_REGISTRY
