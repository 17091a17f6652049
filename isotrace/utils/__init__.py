"""
Formula parsing and formula arithmetic
"""

from isotrace.utils.formulae import (
    formula_map,
    isotope_map,
    reduce_formula,
    to_composition_string,
    to_formula_string,
)

__all__ = [
    "formula_map",
    "isotope_map",
    "reduce_formula",
    "to_composition_string",
    "to_formula_string",
]
