"""
Isotope reference data bridge for molmass.

Provides:
- Exact nuclide masses from molmass.elements.ELEMENTS
- Per-element natural isotopes (mass number, abundance)
- The lightest naturally abundant mass number of an element, which decides
  what counts as a "heavy" isotope
"""
from __future__ import annotations

import threading

from molmass.elements import ELEMENTS

from ..exceptions import UnknownIsotope


class IsotopeReference:
    """
    Read-only view of molmass isotope data.

    Per-element data is cached the first time an element is requested.
    The cache is filled under a lock and never changed afterwards, so an
    instance can be shared between threads.

    Example:
        >>> reference = IsotopeReference()
        >>> round(reference.exact_mass('C', 13), 4)
        13.0034
        >>> reference.lightest_natural_mass_number('N')
        14
    """

    def __init__(self):
        self._isotope_cache: dict[str, dict[int, tuple[float, float]]] = {}
        self._lock = threading.Lock()

    def _isotopes(self, element: str) -> dict[int, tuple[float, float]]:
        """
        Return {mass_number: (exact_mass, abundance)} for an element
        """
        cached = self._isotope_cache.get(element)
        if cached is not None:
            return cached

        if element not in ELEMENTS:
            raise UnknownIsotope(f"Unknown element: '{element}'")

        with self._lock:
            if element not in self._isotope_cache:
                self._isotope_cache[element] = {
                    mass_number: (isotope.mass, isotope.abundance)
                    for mass_number, isotope in ELEMENTS[element].isotopes.items()
                }
        return self._isotope_cache[element]

    def exact_mass(self, element: str, mass_number: int) -> float:
        """
        Exact atomic mass of a nuclide, e.g. ('C', 13) -> 13.00335...

        Raises:
            UnknownIsotope: If the element or this mass number is unknown
        """
        isotopes = self._isotopes(element)
        if mass_number not in isotopes:
            raise UnknownIsotope(
                f"Unknown isotope: '{mass_number}{element}'"
            )
        return isotopes[mass_number][0]

    def natural_isotopes(self, element: str) -> list[tuple[int, float]]:
        """
        Isotopes of an element with nonzero natural abundance, as
        (mass_number, abundance) pairs sorted by mass number.
        """
        return sorted(
            (mass_number, abundance)
            for mass_number, (_, abundance) in self._isotopes(element).items()
            if abundance > 0
        )

    def lightest_natural_mass_number(self, element: str) -> int:
        """
        Smallest mass number among the naturally abundant isotopes.

        Raises:
            UnknownIsotope: If the element has no naturally abundant isotope
        """
        natural = self.natural_isotopes(element)
        if not natural:
            raise UnknownIsotope(
                f"Element '{element}' has no naturally abundant isotope"
            )
        return natural[0][0]


_default_reference: IsotopeReference | None = None
_default_reference_lock = threading.Lock()


def get_default_reference() -> IsotopeReference:
    """Process-wide IsotopeReference, created on first use"""
    global _default_reference
    with _default_reference_lock:
        if _default_reference is None:
            _default_reference = IsotopeReference()
    return _default_reference
