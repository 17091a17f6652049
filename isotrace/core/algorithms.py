"""
Pattern algebra used to pool labelled sub-populations into one pattern.

Peaks are matched on exact floating point equality of their m/z values.
Combining nearby peaks within a tolerance is done once, by the natural
pattern generator, and never here.
"""
import numpy as np

from .pattern import TracedIsotopePattern


def merge_patterns(
    first: TracedIsotopePattern,
    second: TracedIsotopePattern,
) -> TracedIsotopePattern:
    """
    Union of two patterns, sorted by ascending m/z.

    Peaks with bit-identical m/z values are combined: intensities are
    summed and the composition seen first (i.e. from `first`) is kept.

    Args:
        first: Pattern whose compositions win on collisions
        second: Pattern to merge into `first`

    Returns:
        New TracedIsotopePattern, with empty heavy isotope annotations
    """
    intensities: dict[float, float] = {}
    compositions: dict[float, str] = {}

    for pattern in (first, second):
        for mass, intensity, composition in zip(
            pattern.mz.tolist(),
            pattern.intensity.tolist(),
            pattern.isotope_composition,
        ):
            if mass in intensities:
                intensities[mass] += intensity
            else:
                intensities[mass] = intensity
                compositions[mass] = composition

    masses = sorted(intensities)
    return TracedIsotopePattern(
        mz=np.array(masses, dtype=np.float64),
        intensity=np.array([intensities[m] for m in masses], dtype=np.float32),
        isotope_composition=tuple(compositions[m] for m in masses),
        spectrum_type=first.spectrum_type,
    )


def normalize_pattern(
    pattern: TracedIsotopePattern,
    scale: float,
) -> TracedIsotopePattern:
    """
    Rescale intensities so that the tallest peak equals `scale`.
    A pattern without any intensity is returned unchanged.
    """
    if pattern.size == 0:
        return pattern

    max_intensity = float(pattern.intensity.max())
    if max_intensity == 0.0:
        return pattern

    return TracedIsotopePattern(
        mz=pattern.mz,
        intensity=pattern.intensity.astype(np.float64) * (scale / max_intensity),
        isotope_composition=pattern.isotope_composition,
        heavy_isotopes=pattern.heavy_isotopes,
        spectrum_type=pattern.spectrum_type,
    )
