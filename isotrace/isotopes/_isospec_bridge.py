"""
Isotope data bridge for IsoSpecPy.

Provides:
- Per-element mass numbers, in the order IsoSpecPy lists the isotopes of
  an element inside its configurations
"""
from __future__ import annotations


# ---------------------------------------------------------------------------
# Isotope data from IsoSpecPy.PeriodicTbl
# ---------------------------------------------------------------------------

_mass_number_cache: dict[str, tuple[int, ...]] = {}


def _build_mass_number_cache():
    """Build per-element mass numbers from IsoSpecPy's PeriodicTbl."""
    if _mass_number_cache:
        return
    try:
        from IsoSpecPy import PeriodicTbl
    except ImportError as e:
        raise ImportError(
            "IsoSpecPy is required for isotope data. "
            "Install with: pip install IsoSpecPy"
        ) from e

    for symbol, masses in PeriodicTbl.symbol_to_masses.items():
        # Mass numbers are the nearest integers to the exact masses
        _mass_number_cache[symbol] = tuple(int(round(m)) for m in masses)


def get_mass_numbers(symbol: str) -> tuple[int, ...]:
    """
    Mass numbers of an element's isotopes, as ordered by IsoSpecPy.

    Args:
        symbol: Element symbol (e.g., 'C')

    Returns:
        Tuple of mass numbers, e.g. (12, 13) for carbon

    Raises:
        KeyError: If IsoSpecPy has no data for this element
    """
    _build_mass_number_cache()
    return _mass_number_cache[symbol]


def configuration_to_composition(
    symbols: list[str] | tuple[str, ...],
    configuration,
) -> str:
    """
    Render an IsoSpecPy configuration as a composition string.

    A configuration holds, per element, the number of atoms of each
    isotope, e.g. ((5, 1), (2, 0)) for C6N2 gives "[12]C5[13]C[14]N2".
    Isotopes without atoms are left out.
    """
    parts: list[str] = []
    for symbol, counts in zip(symbols, configuration):
        mass_numbers = get_mass_numbers(symbol)
        for mass_number, count in zip(mass_numbers, counts):
            if count == 0:
                continue
            suffix = str(count) if count > 1 else ''
            parts.append(f'[{mass_number}]{symbol}{suffix}')
    return ''.join(parts)
