"""
Tracer accounting: moves a reduced-formula pattern onto the mass grid of its
labelled molecules, and annotates isotopologues with their heavy isotopes.

The patterns handled here are generated from a formula that already lacks
the labelled atoms (see utils.formulae.reduce_formula). Labelling therefore
only ever adds tracer atoms: the mass of the displaced light isotope is
never subtracted.
"""
from __future__ import annotations

from typing import Optional, TYPE_CHECKING

from .pattern import TracedIsotopePattern
from ..utils.formulae import (
    formula_map,
    isotope_map,
    to_composition_string,
    tracer_element,
    tracer_mass_number,
)

if TYPE_CHECKING:
    from ..isotopes._reference import IsotopeReference


def mass_shift(
    tracer: Optional[str],
    capacity: str,
    reference: 'IsotopeReference',
) -> float:
    """
    Mass added by fully labelling the capacity of a tracer's element.

    Args:
        tracer: Tracer token like "13C", or None
        capacity: Capacity formula, e.g. "C2N"
        reference: Isotope reference used to look up the tracer mass

    Returns:
        exact_mass(tracer) * capacity[element], or 0.0 without a tracer

    Raises:
        UnknownIsotope: If the tracer nuclide is unknown
    """
    if not tracer:
        return 0.0

    element = tracer_element(tracer)
    tracer_mass = reference.exact_mass(element, tracer_mass_number(tracer))
    return tracer_mass * formula_map(capacity).get(element, 0)


def add_tracer_mass(
    pattern: TracedIsotopePattern,
    capacity: str,
    tracer1: Optional[str],
    tracer2: Optional[str],
    reference: 'IsotopeReference',
) -> TracedIsotopePattern:
    """
    Shift every peak by the total mass of the given tracers
    """
    shift = (
        mass_shift(tracer1, capacity, reference)
        + mass_shift(tracer2, capacity, reference)
    )
    return TracedIsotopePattern(
        mz=pattern.mz + shift,
        intensity=pattern.intensity,
        isotope_composition=pattern.isotope_composition,
        heavy_isotopes=pattern.heavy_isotopes,
        spectrum_type=pattern.spectrum_type,
    )


def add_tracer_composition(
    pattern: TracedIsotopePattern,
    capacity: str,
    tracer1: Optional[str],
    tracer2: Optional[str],
) -> TracedIsotopePattern:
    """
    Append the tracer atoms to every peak's composition string.

    Each tracer adds capacity[element] atoms of its isotope. New isotopes
    go to the end of the composition; tracers with no capacity leave it
    unchanged.

    Example:
        "[14]N" labelled with capacity "C" and tracer "13C" -> "[14]N[13]C"
    """
    capacities = formula_map(capacity)
    tracers = [t for t in (tracer1, tracer2) if t]

    compositions: list[str] = []
    for composition in pattern.isotope_composition:
        isotopes = isotope_map(composition)
        for tracer in tracers:
            count = capacities.get(tracer_element(tracer), 0)
            isotopes[tracer] = isotopes.get(tracer, 0) + count
        compositions.append(to_composition_string(isotopes))

    return TracedIsotopePattern(
        mz=pattern.mz,
        intensity=pattern.intensity,
        isotope_composition=tuple(compositions),
        heavy_isotopes=pattern.heavy_isotopes,
        spectrum_type=pattern.spectrum_type,
    )


def heavy_isotope_string(
    composition: str,
    reference: 'IsotopeReference',
) -> str:
    """
    Keep only isotopes heavier than their element's lightest natural
    isotope, e.g. "[12]C[15]N2" -> "[15]N2"
    """
    heavy: dict[str, int] = {}
    for token, count in isotope_map(composition).items():
        element = tracer_element(token)
        if tracer_mass_number(token) > reference.lightest_natural_mass_number(element):
            heavy[token] = count
    return to_composition_string(heavy)


def set_heavy_isotopes(
    pattern: TracedIsotopePattern,
    reference: 'IsotopeReference',
) -> TracedIsotopePattern:
    """
    Return a copy of `pattern` with its heavy isotope annotations filled in
    """
    return TracedIsotopePattern(
        mz=pattern.mz,
        intensity=pattern.intensity,
        isotope_composition=pattern.isotope_composition,
        heavy_isotopes=tuple(
            heavy_isotope_string(c, reference)
            for c in pattern.isotope_composition
        ),
        spectrum_type=pattern.spectrum_type,
    )
