"""
isotrace: A Python package for simulating isotope patterns of tracer experiments.

Given a molecular formula, the atoms that a tracer experiment can label, up
to two heavy-isotope tracers and the (natural abundance corrected)
incorporation of each labelling state, this package simulates the centroided
isotope pattern of the resulting pool, annotated with the isotopologue
composition and heavy isotopes behind each peak.

Natural isotope patterns are computed with IsoSpecPy; isotope reference data
comes from molmass.
"""

__version__ = "0.1.0"

# Main API
from .core.simulator import TracedPatternSimulator
from .core.pattern import TracedIsotopePattern, SpectrumType

# Lower-level components
from .core.algorithms import merge_patterns, normalize_pattern
from .isotopes.envelope import generate_isotope_pattern
from .isotopes._reference import IsotopeReference, get_default_reference

# Configs
from .isotopes.config import PatternGenerationConfig

# Errors
from .exceptions import (
    IsotraceError,
    InvalidFormula,
    InvalidRates,
    UnknownIsotope,
    GeneratorFailure,
)

# Module-level singleton for convenience function
_default_simulator = None


def simulate_traced_pattern(
    chemical_formula: str,
    capacity_formula: str,
    tracer1: str | None = None,
    tracer2: str | None = None,
    tracer1_inc: float = 0.0,
    tracer2_inc: float = 0.0,
    tracer_both_inc: float = 0.0,
    min_abundance: float | None = None,
    intensity_scale: float | None = None,
    mz_tolerance: float | None = None,
) -> TracedIsotopePattern:
    """
    Convenience function for simulating a traced isotope pattern right away.

    Calling this function is equivalent to creating a TracedPatternSimulator
    object then calling the TracedPatternSimulator.simulate() method. This
    will accept all the same arguments as simulate().

    Args:
        chemical_formula: Formula of the molecule, e.g. "C6H12O6"
        capacity_formula: Atoms that can be labelled, e.g. "C6"
        tracer1: First tracer isotope, e.g. "13C"
        tracer2: Second tracer isotope, e.g. "15N"
        tracer1_inc: Fraction labelled by tracer1 only
        tracer2_inc: Fraction labelled by tracer2 only
        tracer_both_inc: Fraction labelled by both tracers
        min_abundance: Minimum isotopologue probability
            Default: 1e-4
        intensity_scale: Intensity of the tallest peak
            Default: 1.0
        mz_tolerance: Resolution (Da) of the natural patterns
            Default: 1e-4

    Returns:
        TracedIsotopePattern

    Example:
        >>> from isotrace import simulate_traced_pattern
        >>>
        >>> pattern = simulate_traced_pattern(
        >>>     "CN", "CN",
        >>>     tracer1="13C",
        >>>     tracer2="15N",
        >>>     tracer1_inc=0.2,
        >>>     tracer2_inc=0.2,
        >>>     tracer_both_inc=0.2,
        >>> )
        >>> print(pattern.round_mz(6).to_mid().debug_string())
    """
    global _default_simulator
    if _default_simulator is None:
        _default_simulator = TracedPatternSimulator()

    return _default_simulator.simulate(
        chemical_formula=chemical_formula,
        capacity_formula=capacity_formula,
        tracer1=tracer1,
        tracer2=tracer2,
        tracer1_inc=tracer1_inc,
        tracer2_inc=tracer2_inc,
        tracer_both_inc=tracer_both_inc,
        min_abundance=min_abundance,
        intensity_scale=intensity_scale,
        mz_tolerance=mz_tolerance,
    )


__all__ = [
    # Primary API
    "TracedPatternSimulator",
    "TracedIsotopePattern",
    "SpectrumType",

    # Convenience function
    "simulate_traced_pattern",

    # Lower-level components
    "merge_patterns",
    "normalize_pattern",
    "generate_isotope_pattern",
    "IsotopeReference",
    "get_default_reference",

    # Config
    "PatternGenerationConfig",

    # Errors
    "IsotraceError",
    "InvalidFormula",
    "InvalidRates",
    "UnknownIsotope",
    "GeneratorFailure",
]
