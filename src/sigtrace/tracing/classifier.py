"""
Bounce state machine: what happens to a ray at a single scene hit.

The medium of a ray is either air or foliage. Transitions are keyed on
the material tag of the surface that was hit:

    receiver            air     -> Success
    receiver            foliage -> Absorbed
    ground              foliage -> Absorbed
    foliage             any     -> Refract (medium toggles, budget kept)
    anything else       any     -> Reflect (one unit of budget consumed)
"""

from dataclasses import dataclass, replace
from typing import Union

from sigtrace.config.schema import FOLIAGE_TAG, GROUND_TAG, RECEIVER_TAG, TracingParams
from sigtrace.tracing.refraction import reflect, refract
from sigtrace.tracing.types import Hit, TraceState

AIR_PERMITTIVITY = 1.0


@dataclass(frozen=True)
class Success:
    """Ray reached the receiver from air; its path is committed."""


@dataclass(frozen=True)
class Absorbed:
    """Ray was lost inside foliage; its path is discarded."""


@dataclass(frozen=True)
class Refract:
    """Ray crossed a foliage boundary."""

    state: TraceState


@dataclass(frozen=True)
class Reflect:
    """Ray bounced off an opaque surface."""

    state: TraceState


HitOutcome = Union[Success, Absorbed, Refract, Reflect]


def _foliage_permittivities(in_foliage: bool, foliage_permittivity: float) -> tuple[float, float]:
    # (incident, exit) pair passed to the refraction solver
    if in_foliage:
        return foliage_permittivity, AIR_PERMITTIVITY
    return AIR_PERMITTIVITY, foliage_permittivity


def classify_hit(hit: Hit, state: TraceState, params: TracingParams) -> HitOutcome:
    """
    Decide the outcome of `hit` for a ray in `state`.

    Args:
        hit: Intersection returned by the scene oracle
        state: State of the ray before the hit
        params: Tracing parameters (foliage permittivity and offset)

    Returns:
        Success, Absorbed, or Refract/Reflect carrying the next state
    """
    if hit.tag == RECEIVER_TAG:
        return Absorbed() if state.in_foliage else Success()

    if hit.tag == GROUND_TAG and state.in_foliage:
        return Absorbed()

    if hit.tag == FOLIAGE_TAG:
        eps_in, eps_out = _foliage_permittivities(state.in_foliage, params.foliage_permittivity)
        direction = refract(state.direction, hit.normal, eps_in, eps_out)
        return Refract(
            replace(
                state,
                origin=hit.point + direction * params.foliage_offset,
                direction=direction,
                total_distance=state.total_distance + hit.distance,
                in_foliage=not state.in_foliage,
                refractions=state.refractions + 1,
            )
        )

    return Reflect(
        replace(
            state,
            origin=hit.point,
            direction=reflect(state.direction, hit.normal),
            total_distance=state.total_distance + hit.distance,
            bounces_remaining=state.bounces_remaining - 1,
        )
    )
