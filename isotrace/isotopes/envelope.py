"""
Natural isotope pattern generation using IsoSpecPy.

Produces the natural-abundance pattern of a (reduced) formula as a
TracedIsotopePattern, with one composition string per peak. The traced
simulator composes several of these patterns into a labelled pool.

Requires the IsoSpecPy dependency
"""
from __future__ import annotations

import logging

from molmass.elements import ELECTRON

from ._isospec_bridge import configuration_to_composition
from ..core.pattern import TracedIsotopePattern, pattern_from_peaks
from ..exceptions import GeneratorFailure
from ..utils.formulae import (
    FORMULA_PATTERN,
    charge_from_suffix,
    formula_map,
    split_charge,
    validate_formula,
)

try:
    import IsoSpecPy as iso
except ImportError:
    iso = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


def generate_isotope_pattern(
    formula: str,
    min_abundance: float,
    scale: float,
    mz_tolerance: float,
) -> TracedIsotopePattern:
    """
    Calculate the natural isotope pattern of a chemical formula.

    Handles charged species by stripping the charge notation for the
    IsoSpecPy calculation, then adjusting m/z values for electron mass
    and charge.

    Args:
        formula: Chemical formula, optionally bracketed and charged,
            e.g. "C6H12O6", "[C6H11O6]-", "[H12O6]2+"

        min_abundance: Minimum probability for an isotopologue to be
            included in the pattern

        scale: Intensity given to the tallest peak

        mz_tolerance: Minimum difference in m/z values - signals less
            resolved than this will be combined

    Returns:
        TracedIsotopePattern sorted by m/z, without heavy isotope
        annotations

    Raises:
        InvalidFormula: If the formula string is malformed
        GeneratorFailure: If IsoSpecPy is not installed, or no
            isotopologue reaches `min_abundance`
    """
    if iso is None:
        raise GeneratorFailure(
            "IsoSpecPy is required for isotope pattern generation. "
            "Install with: pip install IsoSpecPy"
        )

    validate_formula(formula, FORMULA_PATTERN)
    body, charge_suffix = split_charge(formula)
    charge = charge_from_suffix(charge_suffix)

    # Explicit counts, in order of first appearance in the formula
    elements = formula_map(body)
    symbols = list(elements)
    isospec_formula = ''.join(f'{s}{c}' for s, c in elements.items())

    isotope_calculator = iso.IsoThreshold(
        threshold=min_abundance,
        formula=isospec_formula,
        absolute=True,
        get_confs=True,
    )

    isologues: list[tuple[float, float, str]] = []
    for mass, probability, configuration in zip(
        isotope_calculator.masses,
        isotope_calculator.probs,
        isotope_calculator.confs,
    ):
        mass = float(mass)
        probability = float(probability)

        # Adjust mass for charge state
        if charge != 0:
            mz = (mass - charge * ELECTRON.mass) / abs(charge)
        else:
            mz = mass

        isologues.append((
            mz,
            probability,
            configuration_to_composition(symbols, configuration),
        ))

    if not isologues:
        raise GeneratorFailure(
            f"No isotopologue of '{formula}' has an abundance of at "
            f"least {min_abundance}"
        )

    isologues = combine_unresolved_isotopologues(
        isologues,
        mz_tolerance=mz_tolerance,
    )
    isologues = rescale_envelope(isologues, scale=scale)

    logger.debug(
        "Generated %d peaks for %s (scale=%g)",
        len(isologues), formula, scale,
    )

    return pattern_from_peaks(isologues)


def combine_unresolved_isotopologues(
    isologues: list[tuple[float, float, str]],
    mz_tolerance: float,
) -> list[tuple[float, float, str]]:
    """
    Combines isotopologues that are within `mz_tolerance` of each other.

    To combine, the intensities are summed, and the mass and composition
    of the lightest isotopologue of the group are kept

    Args:
        isologues: List of (mass, intensity, composition) triples
        mz_tolerance: Mass tolerance in Daltons for combining peaks

    Returns:
        List of combined triples, sorted by mass
    """
    sorted_isologues = sorted(isologues, key=lambda p: p[0])

    result: list[tuple[float, float, str]] = []
    i = 0

    while i < len(sorted_isologues):
        current_mass, current_intensity, current_composition = sorted_isologues[i]

        j = i + 1

        # Find all peaks close to the lightest one of the group
        while (
            j < len(sorted_isologues) and
            abs(sorted_isologues[j][0] - current_mass) <= mz_tolerance
        ):
            current_intensity += sorted_isologues[j][1]
            j += 1

        result.append((current_mass, current_intensity, current_composition))
        i = j

    return result


def rescale_envelope(
    isologues: list[tuple[float, float, str]],
    scale: float = 1.0,
) -> list[tuple[float, float, str]]:
    """
    Scales intensities so that the tallest peak equals `scale`

    Args:
        isologues: List of (mass, intensity, composition) triples
        scale: Target intensity of the tallest peak

    Returns:
        List of rescaled triples
    """
    max_intensity = max(p[1] for p in isologues)
    if max_intensity == 0.0:
        return isologues
    factor = scale / max_intensity
    return [(mz, intensity * factor, comp) for mz, intensity, comp in isologues]
