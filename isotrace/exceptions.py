"""
Exceptions raised by isotrace.

The argument errors also derive from the matching builtin types, so
callers catching ValueError/KeyError keep working.
"""


class IsotraceError(Exception):
    """Base class for all isotrace errors"""


class InvalidFormula(IsotraceError, ValueError):
    """A formula, capacity or tracer string does not match its grammar"""


class InvalidRates(IsotraceError, ValueError):
    """Incorporation rates are negative or sum to more than 1"""


class UnknownIsotope(IsotraceError, KeyError):
    """The isotope reference has no data for an element or nuclide"""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ''


class GeneratorFailure(IsotraceError, RuntimeError):
    """The natural-abundance pattern generator could not produce a pattern"""
