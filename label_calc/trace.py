"""Human readable derivation of a packing calculation."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, NamedTuple, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from .calculator import PackingResult

INPUT = "input"
PALLET_INPUT = "pallet_input"
CONTAINERS = "containers"
PALLETS = "pallets"
SUMMARY = "summary"

_PALLET_KINDS = frozenset({PALLET_INPUT, PALLETS})


class TraceStep(NamedTuple):
    kind: str
    text: str


def _count(value: int, singular: str, plural: str) -> str:
    return f"{value} {singular if value == 1 else plural}"


def build_trace(
    *,
    total_units: int,
    units_per_container: int,
    containers_per_pallet: int,
    full_containers: int,
    remainder_units: int,
    total_containers: int,
    full_pallets: int,
    remainder_containers: int,
) -> Tuple[TraceStep, ...]:
    """Return every arithmetic step, pieces -> packages -> pallets, in order."""

    steps: List[TraceStep] = [
        TraceStep(INPUT, f"Total pieces: {total_units}"),
        TraceStep(INPUT, f"Pieces per package: {units_per_container}"),
        TraceStep(PALLET_INPUT, f"Packages per pallet: {containers_per_pallet}"),
    ]

    division = (
        f"{total_units} / {units_per_container} = "
        f"{_count(full_containers, 'full package', 'full packages')}"
    )
    if remainder_units:
        division += f" ({_count(remainder_units, 'piece', 'pieces')} left over)"
    steps.append(TraceStep(CONTAINERS, division))
    if remainder_units:
        steps.append(
            TraceStep(
                CONTAINERS,
                f"{full_containers} + 1 extra package = "
                f"{_count(total_containers, 'package', 'packages')}",
            )
        )

    pallet_division = (
        f"{total_containers} / {containers_per_pallet} = "
        f"{_count(full_pallets, 'full pallet', 'full pallets')}"
    )
    if remainder_containers:
        pallet_division += (
            f" ({_count(remainder_containers, 'package', 'packages')} left over)"
        )
    on_full_pallets = containers_per_pallet * full_pallets
    steps.extend(
        [
            TraceStep(PALLETS, pallet_division),
            TraceStep(
                PALLETS,
                f"{containers_per_pallet} * {full_pallets} = "
                f"{_count(on_full_pallets, 'package', 'packages')} on full pallets",
            ),
            TraceStep(
                PALLETS,
                f"{total_containers} - {on_full_pallets} = "
                f"{_count(remainder_containers, 'package', 'packages')} remaining",
            ),
        ]
    )
    pallet_total = f"Total pallets: {full_pallets} full"
    if remainder_containers:
        pallet_total += (
            " and 1 partial pallet with "
            f"{_count(remainder_containers, 'package', 'packages')}"
        )
    steps.append(TraceStep(PALLETS, pallet_total))

    steps.append(
        TraceStep(
            SUMMARY,
            f"{_count(total_units, 'piece', 'pieces')} distributed in "
            f"{_count(total_containers, 'package', 'packages')}",
        )
    )
    return tuple(steps)


def visible_lines(
    result: "PackingResult", include_pallets: Optional[bool] = None
) -> List[str]:
    """Trace lines to display.

    ``include_pallets=None`` hides the pallet steps when every package is its
    own pallet. The computed values are never affected.
    """

    if include_pallets is None:
        include_pallets = result.uses_pallets
    return [
        step.text
        for step in result.trace
        if include_pallets or step.kind not in _PALLET_KINDS
    ]


def render_trace(result: "PackingResult", include_pallets: Optional[bool] = None) -> str:
    return "\n\n".join(visible_lines(result, include_pallets))


def headline(result: "PackingResult") -> str:
    text = f"Total labels: {result.total_containers}"
    if result.extra_container_needed:
        text += (
            f" ({result.full_containers} full + 1 extra with "
            f"{_count(result.remainder_units, 'piece', 'pieces')})"
        )
    return text
