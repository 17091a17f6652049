"""
Configuration objects for natural isotope pattern generation
"""
from dataclasses import dataclass


@dataclass
class PatternGenerationConfig:
    """
    Settings passed to the natural-abundance pattern generator.

    Attributes:
        min_abundance: Isotopologues with a probability below this value
            are left out of generated patterns. Must be in (0, 1).
            Default: 1e-4
        intensity_scale: Intensity of the tallest peak in the final
            simulated pattern. Default: 1.0
        mz_tolerance: Peaks closer than this (in Da) are combined by the
            generator. Default: 1e-4

    Example:
        >>> config = PatternGenerationConfig(min_abundance=1e-5)
        >>> simulator = TracedPatternSimulator(config=config)
    """
    min_abundance: float = 1e-4
    intensity_scale: float = 1.0
    mz_tolerance: float = 1e-4

    def __post_init__(self):
        if not 0.0 < self.min_abundance < 1.0:
            raise ValueError(
                f"min_abundance must be between 0.0 and 1.0. "
                f"Given: {self.min_abundance}"
            )
        if self.intensity_scale < 0.0:
            raise ValueError(
                f"intensity_scale must not be negative. "
                f"Given: {self.intensity_scale}"
            )
        if self.mz_tolerance < 0.0:
            raise ValueError(
                f"mz_tolerance must not be negative. "
                f"Given: {self.mz_tolerance}"
            )
