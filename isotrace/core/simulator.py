"""
Main API entry point for isotrace

This module contains TracedPatternSimulator, which orchestrates
- parameter validation
- natural pattern generation for the unlabelled and labelled sub-populations
- tracer accounting and pooling of the sub-patterns
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, TYPE_CHECKING

from .algorithms import merge_patterns, normalize_pattern
from .pattern import TracedIsotopePattern
from .tracing import add_tracer_composition, add_tracer_mass, set_heavy_isotopes
from ..exceptions import InvalidFormula, InvalidRates
from ..isotopes._reference import get_default_reference
from ..isotopes.config import PatternGenerationConfig
from ..isotopes.envelope import generate_isotope_pattern
from ..utils.formulae import (
    FORMULA_PATTERN,
    TRACER_PATTERN,
    UNCHARGED_FORMULA_PATTERN,
    check_capacity,
    reduce_formula,
    split_charge,
    tracer_element,
    validate_formula,
)

if TYPE_CHECKING:
    from ..isotopes._reference import IsotopeReference

logger = logging.getLogger(__name__)


class TracedPatternSimulator:
    """
    API for simulating isotope patterns of tracer experiments

    The simulated pool is a mixture of four sub-populations: unlabelled
    molecules, molecules labelled by tracer 1 only, by tracer 2 only, and
    by both tracers. Labelled molecules carry the tracer isotope on every
    atom allowed by the capacity formula; all other atoms keep their
    natural isotope distribution.

    Example:
        >>> simulator = TracedPatternSimulator()
        >>>
        >>> # 50% of a C6 pool fully labelled with 13C
        >>> pattern = simulator.simulate(
        >>>     chemical_formula='C6H12O6',
        >>>     capacity_formula='C6',
        >>>     tracer1='13C',
        >>>     tracer1_inc=0.5,
        >>> )
    """

    def __init__(
        self,
        reference: Optional['IsotopeReference'] = None,
        config: Optional[PatternGenerationConfig] = None,
    ):
        """
        Initialize TracedPatternSimulator.

        Args:
            reference: Isotope reference data used for tracer masses and
                heavy isotope detection.
                Default: the process-wide molmass-backed reference

            config: Default generation settings, used for any setting not
                given to simulate()
                Default: PatternGenerationConfig()
        """
        self.reference = reference if reference is not None else get_default_reference()
        self.config = config if config is not None else PatternGenerationConfig()

    @staticmethod
    def _check_parameters(
        chemical_formula: str,
        capacity_formula: str,
        tracer1: Optional[str],
        tracer2: Optional[str],
        rates: tuple[float, float, float],
    ) -> None:
        """
        Raises:
            InvalidFormula: If a formula or tracer is malformed, both tracers
                name the same element, or the capacity asks for more atoms
                than the formula has
            InvalidRates: If any rate is negative or their sum exceeds 1
        """
        validate_formula(chemical_formula, FORMULA_PATTERN)
        validate_formula(capacity_formula, UNCHARGED_FORMULA_PATTERN)
        validate_formula(tracer1, TRACER_PATTERN)
        validate_formula(tracer2, TRACER_PATTERN)

        if tracer1 and tracer2 and tracer_element(tracer1) == tracer_element(tracer2):
            raise InvalidFormula(
                f"Tracers must label different elements. Given: "
                f"'{tracer1}' and '{tracer2}'"
            )

        if any(rate < 0 for rate in rates):
            raise InvalidRates(
                f"Incorporation rates must not be negative. Given: {rates}"
            )
        if sum(rates) > 1:
            raise InvalidRates(
                f"(Sum of) rate(s) must be in [0,1]. Given: {rates}"
            )

        body, _ = split_charge(chemical_formula)
        check_capacity(body, capacity_formula)

    def _labelled_pattern(
        self,
        reduced_formula: str,
        weight: float,
        min_abundance: float,
        mz_tolerance: float,
    ) -> TracedIsotopePattern:
        """
        Natural pattern of the unlabelled remainder of a labelled molecule.
        When nothing remains, a single peak at m/z 0 stands in for it, so
        that adding the tracer mass puts it at the fully labelled mass.
        """
        if '[]' in reduced_formula:
            return TracedIsotopePattern.single_point(weight)

        return generate_isotope_pattern(
            reduced_formula,
            min_abundance=min_abundance,
            scale=weight,
            mz_tolerance=mz_tolerance,
        )

    def simulate(
        self,
        chemical_formula: str,
        capacity_formula: str,
        tracer1: Optional[str] = None,
        tracer2: Optional[str] = None,
        tracer1_inc: float = 0.0,
        tracer2_inc: float = 0.0,
        tracer_both_inc: float = 0.0,
        min_abundance: Optional[float] = None,
        intensity_scale: Optional[float] = None,
        mz_tolerance: Optional[float] = None,
    ) -> TracedIsotopePattern:
        """
        Simulate the isotope pattern of a partially labelled pool.

        Args:
            chemical_formula: Formula of the molecule, optionally bracketed
                and charged, e.g. "C6H12O6" or "[C6H11O6]-"

            capacity_formula: Atoms that can be labelled, e.g. "C6".
                Must not exceed the molecule's formula.

            tracer1: First tracer isotope, e.g. "13C", or None
            tracer2: Second tracer isotope, e.g. "15N", or None

            tracer1_inc: Fraction of the pool labelled by tracer1 only
            tracer2_inc: Fraction of the pool labelled by tracer2 only
            tracer_both_inc: Fraction of the pool labelled by both tracers
                The three fractions are already corrected for natural
                abundance; the unlabelled fraction is 1 minus their sum.

            min_abundance: Minimum isotopologue probability
            intensity_scale: Intensity of the tallest peak in the result
            mz_tolerance: Peaks of one natural pattern closer than this
                (in Da) are combined
                These three default to the simulator's config.

        Returns:
            TracedIsotopePattern sorted by m/z, with isotope compositions
            and heavy isotope annotations

        Raises:
            InvalidFormula: If a formula or tracer is malformed
            InvalidRates: If incorporation rates are invalid
            ValueError: If a generation setting is out of range
            UnknownIsotope: If a tracer is not a known nuclide
            GeneratorFailure: If a natural pattern cannot be generated
        """
        # Per-call overrides go through the config checks as well
        settings = replace(
            self.config,
            **{
                name: value for name, value in (
                    ('min_abundance', min_abundance),
                    ('intensity_scale', intensity_scale),
                    ('mz_tolerance', mz_tolerance),
                ) if value is not None
            },
        )
        min_abundance = settings.min_abundance
        intensity_scale = settings.intensity_scale
        mz_tolerance = settings.mz_tolerance

        self._check_parameters(
            chemical_formula,
            capacity_formula,
            tracer1,
            tracer2,
            (tracer1_inc, tracer2_inc, tracer_both_inc),
        )

        body, charge_suffix = split_charge(chemical_formula)
        reduced_for_tracer1 = (
            f"[{reduce_formula(body, capacity_formula, tracer1, None)}]{charge_suffix}"
        )
        reduced_for_tracer2 = (
            f"[{reduce_formula(body, capacity_formula, None, tracer2)}]{charge_suffix}"
        )
        reduced_for_both = (
            f"[{reduce_formula(body, capacity_formula, tracer1, tracer2)}]{charge_suffix}"
        )
        logger.debug(
            "Reduced formulae for %s: tracer1=%s, tracer2=%s, both=%s",
            chemical_formula,
            reduced_for_tracer1,
            reduced_for_tracer2,
            reduced_for_both,
        )

        total_inc = tracer1_inc + tracer2_inc + tracer_both_inc
        natural_pattern = generate_isotope_pattern(
            chemical_formula,
            min_abundance=min_abundance,
            scale=1.0 - total_inc,
            mz_tolerance=mz_tolerance,
        )

        # (tracer1, tracer2) pairs used to label each sub-population
        labelled_patterns: list[TracedIsotopePattern] = []
        for reduced_formula, weight, tracers in [
            (reduced_for_tracer1, tracer1_inc, (tracer1, None)),
            (reduced_for_tracer2, tracer2_inc, (None, tracer2)),
            (reduced_for_both, tracer_both_inc, (tracer1, tracer2)),
        ]:
            pattern = self._labelled_pattern(
                reduced_formula,
                weight,
                min_abundance,
                mz_tolerance,
            )
            pattern = add_tracer_mass(
                pattern, capacity_formula, *tracers, reference=self.reference,
            )
            pattern = add_tracer_composition(pattern, capacity_formula, *tracers)
            labelled_patterns.append(pattern)

        # Left fold; on equal masses the earlier pattern's composition wins
        merged_pattern = natural_pattern
        for pattern in labelled_patterns:
            merged_pattern = merge_patterns(merged_pattern, pattern)

        merged_pattern = normalize_pattern(merged_pattern, intensity_scale)
        merged_pattern = set_heavy_isotopes(merged_pattern, self.reference)

        logger.debug(
            "Simulated %d peaks for %s", merged_pattern.size, chemical_formula,
        )
        return merged_pattern
