"""Core label and pallet packing calculations."""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any, Dict, Mapping, Tuple

from .trace import TraceStep, build_trace


class InvalidArgument(ValueError):
    """Raised when a packing input cannot be used for the calculation."""


@dataclass(frozen=True)
class PackingInput:
    """Piece count of a batch and the packaging it is split into."""

    total_units: int
    units_per_container: int
    containers_per_pallet: int = 1

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "PackingInput":
        try:
            total_units = _as_int(raw["total_units"])
            units_per_container = _as_int(raw["units_per_container"])
            containers_per_pallet = _as_int(raw.get("containers_per_pallet", 1))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(
                f"Invalid packing input: {json.dumps(dict(raw), default=str)}"
            ) from exc
        return cls(total_units, units_per_container, containers_per_pallet)


@dataclass(frozen=True)
class PackingResult:
    total_units: int
    units_per_container: int
    containers_per_pallet: int
    full_containers: int
    remainder_units: int
    extra_container_needed: bool
    total_containers: int
    full_pallets: int
    remainder_containers: int
    total_pallets: int
    trace: Tuple[TraceStep, ...] = ()

    @property
    def derivation_trace(self) -> Tuple[str, ...]:
        return tuple(step.text for step in self.trace)

    @property
    def labels_needed(self) -> int:
        return self.total_containers

    @property
    def containers_on_full_pallets(self) -> int:
        return self.full_pallets * self.containers_per_pallet

    @property
    def uses_pallets(self) -> bool:
        return self.containers_per_pallet > 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_units": self.total_units,
            "units_per_container": self.units_per_container,
            "containers_per_pallet": self.containers_per_pallet,
            "full_containers": self.full_containers,
            "remainder_units": self.remainder_units,
            "extra_container_needed": self.extra_container_needed,
            "total_containers": self.total_containers,
            "full_pallets": self.full_pallets,
            "remainder_containers": self.remainder_containers,
            "total_pallets": self.total_pallets,
            "derivation_trace": list(self.derivation_trace),
        }


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("Boolean values are not counts.")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value} is not a whole number.")
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            # "10.0" from a number input goes through the whole-number check.
            return _as_int(float(text))
    if isinstance(value, int):
        return value
    raise TypeError(f"Unsupported value type: {type(value).__name__}")


def _validate(total_units: int, units_per_container: int, containers_per_pallet: int) -> None:
    for name, value in (
        ("total_units", total_units),
        ("units_per_container", units_per_container),
        ("containers_per_pallet", containers_per_pallet),
    ):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidArgument(f"{name} must be an integer, got {value!r}.")
    if units_per_container < 1:
        raise InvalidArgument("units_per_container must be at least 1.")
    if containers_per_pallet < 1:
        raise InvalidArgument("containers_per_pallet must be at least 1.")
    if total_units < 0:
        raise InvalidArgument("total_units cannot be negative.")


def compute(
    total_units: int,
    units_per_container: int,
    containers_per_pallet: int = 1,
) -> PackingResult:
    """Split ``total_units`` pieces into labelled containers and pallets.

    A partially filled container still gets its own label, so the container
    count is rounded up. Pallets are counted the same way from the containers.
    ``containers_per_pallet == 1`` is valid and makes every container its own
    pallet.

    Raises:
        InvalidArgument: if a divisor is lower than 1, ``total_units`` is
            negative, or any argument is not an integer.
    """

    _validate(total_units, units_per_container, containers_per_pallet)

    full_containers, remainder_units = divmod(total_units, units_per_container)
    extra_container_needed = remainder_units > 0
    total_containers = full_containers + (1 if extra_container_needed else 0)

    full_pallets, remainder_containers = divmod(total_containers, containers_per_pallet)
    total_pallets = full_pallets + (1 if remainder_containers > 0 else 0)

    trace = build_trace(
        total_units=total_units,
        units_per_container=units_per_container,
        containers_per_pallet=containers_per_pallet,
        full_containers=full_containers,
        remainder_units=remainder_units,
        total_containers=total_containers,
        full_pallets=full_pallets,
        remainder_containers=remainder_containers,
    )

    return PackingResult(
        total_units=total_units,
        units_per_container=units_per_container,
        containers_per_pallet=containers_per_pallet,
        full_containers=full_containers,
        remainder_units=remainder_units,
        extra_container_needed=extra_container_needed,
        total_containers=total_containers,
        full_pallets=full_pallets,
        remainder_containers=remainder_containers,
        total_pallets=total_pallets,
        trace=trace,
    )


def calculate_packing(data: PackingInput) -> PackingResult:
    return compute(data.total_units, data.units_per_container, data.containers_per_pallet)
