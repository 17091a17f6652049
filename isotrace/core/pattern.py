"""
This module has the TracedIsotopePattern class, the value produced by the
traced pattern simulator, and provides post-processing methods for:
- m/z rounding (with merging of collapsed peaks)
- intensity rounding
- conversion to a mass-isotopomer distribution (MID)
- display
- export
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import pandas as pd


class SpectrumType(Enum):
    CENTROIDED = 'centroided'


def _round_half_up(values: np.ndarray, precision: int) -> np.ndarray:
    """
    Round to `precision` decimals, with halves rounded up.
    np.round() rounds halves to even, which moves some masses by one
    unit in the last place compared to the usual half-up convention.
    """
    factor = 10.0 ** precision
    return np.floor(values.astype(np.float64) * factor + 0.5) / factor


@dataclass(frozen=True, eq=False)
class TracedIsotopePattern:
    """
    Centroided isotope pattern with per-peak isotope annotations.

    All four per-peak sequences have the same length. The arrays are copied
    and made read-only on construction; every method returns a new pattern.

    Attributes:
        mz: float64 array of m/z values
        intensity: float32 array of non-negative intensities
        isotope_composition: Composition string of the isotopologue(s)
            behind each peak, e.g. "[12]C[15]N"
        heavy_isotopes: Subset of each composition holding only isotopes
            heavier than the lightest natural isotope of their element.
            Empty strings until the pattern has been annotated.
        spectrum_type: Always SpectrumType.CENTROIDED for simulated patterns

    Example:
        >>> pattern = simulate_traced_pattern("C", "C", "13C", None, 0.5, 0, 0)
        >>> mid = pattern.round_mz(6).round_intensities(6).to_mid()
        >>> print(mid.debug_string())
    """
    mz: np.ndarray
    intensity: np.ndarray
    isotope_composition: tuple[str, ...]
    heavy_isotopes: tuple[str, ...] = field(default=())
    spectrum_type: SpectrumType = SpectrumType.CENTROIDED

    def __post_init__(self):
        mz = np.array(self.mz, dtype=np.float64)
        intensity = np.array(self.intensity, dtype=np.float32)
        compositions = tuple(self.isotope_composition)
        heavy = tuple(self.heavy_isotopes) or ('',) * len(compositions)

        if not (len(mz) == len(intensity) == len(compositions) == len(heavy)):
            raise ValueError(
                f"Pattern arrays must have the same length. Given: "
                f"mz={len(mz)}, intensity={len(intensity)}, "
                f"isotope_composition={len(compositions)}, "
                f"heavy_isotopes={len(heavy)}"
            )

        mz.setflags(write=False)
        intensity.setflags(write=False)
        object.__setattr__(self, 'mz', mz)
        object.__setattr__(self, 'intensity', intensity)
        object.__setattr__(self, 'isotope_composition', compositions)
        object.__setattr__(self, 'heavy_isotopes', heavy)

    @classmethod
    def single_point(
        cls,
        intensity: float,
        mz: float = 0.0,
        composition: str = '',
    ) -> 'TracedIsotopePattern':
        """
        Pattern made of one peak. Used when a formula has no atoms left
        once the labelled ones are taken out.
        """
        return cls(
            mz=np.array([mz], dtype=np.float64),
            intensity=np.array([intensity], dtype=np.float32),
            isotope_composition=(composition,),
        )

    @property
    def size(self) -> int:
        return len(self.mz)

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        summary = (
            f"TracedIsotopePattern(n_peaks={self.size}, "
            f"spectrum_type={self.spectrum_type.value})"
        )
        if self.size == 0:
            return summary
        return "\n".join([summary, "", self.to_table(max_rows=5)])

    # === POST-PROCESSING ===
    def round_mz(self, precision: int) -> 'TracedIsotopePattern':
        """
        Round m/z values, merging peaks that end up on the same value.

        Intensities of merged peaks are summed. The composition and heavy
        isotope strings of the first merged peak are kept. Peaks stay in
        the order in which their rounded m/z first appears; the result is
        not re-sorted.

        Args:
            precision: Number of decimal places to keep

        Returns:
            New TracedIsotopePattern
        """
        rounded = _round_half_up(self.mz, precision)

        intensities: dict[float, float] = {}
        compositions: dict[float, str] = {}
        heavy_isotopes: dict[float, str] = {}
        for i, mass in enumerate(rounded.tolist()):
            if mass in intensities:
                intensities[mass] += float(self.intensity[i])
                continue
            intensities[mass] = float(self.intensity[i])
            compositions[mass] = self.isotope_composition[i]
            heavy_isotopes[mass] = self.heavy_isotopes[i]

        return TracedIsotopePattern(
            mz=np.fromiter(intensities.keys(), dtype=np.float64),
            intensity=np.fromiter(intensities.values(), dtype=np.float32),
            isotope_composition=tuple(compositions.values()),
            heavy_isotopes=tuple(heavy_isotopes.values()),
            spectrum_type=self.spectrum_type,
        )

    def round_intensities(self, precision: int) -> 'TracedIsotopePattern':
        """
        Round intensities to `precision` decimal places
        """
        return TracedIsotopePattern(
            mz=self.mz,
            intensity=_round_half_up(self.intensity, precision),
            isotope_composition=self.isotope_composition,
            heavy_isotopes=self.heavy_isotopes,
            spectrum_type=self.spectrum_type,
        )

    def to_mid(self) -> 'TracedIsotopePattern':
        """
        Convert intensities to a mass-isotopomer distribution, i.e.
        divide them by their sum so that they add up to 1.

        Raises:
            ValueError: If the total intensity is zero
        """
        total = float(np.sum(self.intensity, dtype=np.float64))
        if total == 0.0:
            raise ValueError(
                "Cannot convert a pattern with zero total intensity to a MID"
            )

        return TracedIsotopePattern(
            mz=self.mz,
            intensity=self.intensity.astype(np.float64) / total,
            isotope_composition=self.isotope_composition,
            heavy_isotopes=self.heavy_isotopes,
            spectrum_type=self.spectrum_type,
        )

    # === FORMATTING METHODS ===
    def debug_string(self) -> str:
        """
        Fixed-width table of every peak, one per line
        """
        lines = [
            "",
            f"{'Mass':<9}|{'Intensity':<9}|"
            f"{'Heavy isotopes':<20}|{'Isotope formula':<50}|",
        ]
        for i in range(self.size):
            lines.append(
                f"{self.mz[i]:<5.6f}|{self.intensity[i]:<1.7f}|"
                f"{self.heavy_isotopes[i]:<20}|"
                f"{self.isotope_composition[i]:<50}|"
            )
        return "\n".join(lines) + "\n"

    def to_table(
        self,
        max_rows: Optional[int] = None
    ) -> str:
        """
        Return formatted table of peaks

        Args:
            max_rows: Maximum number of rows to display. None shows all.

        Returns:
            Formatted string table
        """
        n = self.size
        if n == 0:
            return "No peaks."

        show_n = n if max_rows is None else min(n, max_rows)

        header = (
            f"{'m/z':<14} {'Intensity':<12} "
            f"{'Heavy isotopes':<20} {'Composition':<30}"
        )
        lines: list[str] = [header, "-" * 79]
        for i in range(show_n):
            lines.append(
                f"{self.mz[i]:<14.6f} {self.intensity[i]:<12.6f} "
                f"{self.heavy_isotopes[i]:<20} {self.isotope_composition[i]:<30}"
            )

        if max_rows is not None and n > max_rows:
            lines.append(f"... and {n - max_rows} more")

        return "\n".join(lines)

    def to_dataframe(self) -> 'pd.DataFrame':
        """
        Convert the pattern to a pandas DataFrame, if pandas is installed.

        Returns:
            pandas.DataFrame with columns mz, intensity, heavy_isotopes and
            isotope_composition

        Raises:
            ImportError: If pandas is not installed
        """
        try:
            import pandas as pd
        except ImportError:
            raise ImportError(
                "pandas is required for to_dataframe(). "
                "Install with: pip install pandas"
            )

        return pd.DataFrame({
            'mz': self.mz.tolist(),
            'intensity': self.intensity.tolist(),
            'heavy_isotopes': list(self.heavy_isotopes),
            'isotope_composition': list(self.isotope_composition),
        })


def pattern_from_peaks(
    peaks: Sequence[tuple[float, float, str]],
) -> TracedIsotopePattern:
    """
    Build a pattern from (mz, intensity, composition) triples
    """
    return TracedIsotopePattern(
        mz=np.array([p[0] for p in peaks], dtype=np.float64),
        intensity=np.array([p[1] for p in peaks], dtype=np.float32),
        isotope_composition=tuple(p[2] for p in peaks),
    )
