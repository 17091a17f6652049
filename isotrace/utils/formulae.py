"""
This module parses, validates and manipulates formula strings

Three kinds of strings are handled:
- chemical formulae, optionally bracketed and charged, e.g. "[C6H12O6]2+"
- uncharged plain formulae (used for capacities), e.g. "C6N2"
- isotope composition strings, e.g. "[12]C5[13]C[14]N2"

All mappings returned here are plain dicts, whose insertion order is the
order of first appearance in the input string. That order is carried into
every rendered string, so it must never be sorted.
"""
import re
from typing import Optional

from ..exceptions import InvalidFormula

FORMULA_PATTERN = re.compile(
    r'^[\[\(]?((?:[A-Z][a-z]?[0-9]*)+)[\]\)]?(([0-9]*)([-+]))?$'
)
UNCHARGED_FORMULA_PATTERN = re.compile(r'^((?:[A-Z][a-z]?[0-9]*)+)$')
TRACER_PATTERN = re.compile(r'^([0-9]+)([A-Z][a-z]?)$')

# Token streams (searched, not anchored)
ELEMENT_PATTERN = re.compile(r'([A-Z][a-z]?)([0-9]*)')
COMPOSITION_PATTERN = re.compile(r'\[([0-9]+)\]([A-Z][a-z]?)([0-9]*)')


def validate_formula(
    formula: Optional[str],
    pattern: re.Pattern,
) -> None:
    """
    Check that the whole of `formula` matches `pattern`.

    Args:
        formula: String to check. None means "no formula" and is accepted,
            which is how absent tracers are passed around.
        pattern: One of FORMULA_PATTERN, UNCHARGED_FORMULA_PATTERN or
            TRACER_PATTERN

    Raises:
        InvalidFormula: If the string does not match the grammar
    """
    if formula is None:
        return

    if pattern.fullmatch(formula) is None:
        raise InvalidFormula(f"Invalid formula: '{formula}'")


def split_charge(formula: str) -> tuple[str, str]:
    """
    Split a chemical formula into its uncharged body and charge suffix.

    Examples:
        >>> split_charge("C6H12O6")
        ('C6H12O6', '')
        >>> split_charge("[C6H11O6]2-")
        ('C6H11O6', '2-')
    """
    match = FORMULA_PATTERN.fullmatch(formula)
    if match is None:
        raise InvalidFormula(f"Invalid formula: '{formula}'")

    body = match.group(1)
    charge_count = match.group(3) or ''
    charge_sign = match.group(4) or ''
    return body, charge_count + charge_sign


def charge_from_suffix(suffix: str) -> int:
    """
    Convert a charge suffix like "2+" or "-" into a signed integer.
    An empty suffix is a neutral species.
    """
    if not suffix:
        return 0

    count = int(suffix[:-1]) if suffix[:-1] else 1
    return count if suffix[-1] == '+' else -count


def tracer_element(tracer: str) -> str:
    """Element symbol of an isotope token, e.g. "13C" -> "C" """
    match = TRACER_PATTERN.fullmatch(tracer)
    if match is None:
        raise InvalidFormula(f"Invalid tracer: '{tracer}'")
    return match.group(2)


def tracer_mass_number(tracer: str) -> int:
    """Mass number of an isotope token, e.g. "13C" -> 13"""
    match = TRACER_PATTERN.fullmatch(tracer)
    if match is None:
        raise InvalidFormula(f"Invalid tracer: '{tracer}'")
    return int(match.group(1))


def formula_map(formula: str) -> dict[str, int]:
    """
    Parse a plain formula into element counts.

    Behaviour:
    - Elements without counts default to 1 (i.e. "S" → S: 1)
    - Order follows first appearance in the string
    - Counts of a repeated element are summed, e.g. "C2H5OH" → H: 6

    Examples:
        >>> formula_map("C6H12O6")
        {'C': 6, 'H': 12, 'O': 6}
        >>> formula_map("NC")
        {'N': 1, 'C': 1}
    """
    parsed: dict[str, int] = {}
    for symbol, count in ELEMENT_PATTERN.findall(formula):
        parsed[symbol] = parsed.get(symbol, 0) + (int(count) if count else 1)
    return parsed


def isotope_map(composition: str) -> dict[str, int]:
    """
    Parse an isotope composition string into isotope-token counts.

    Examples:
        >>> isotope_map("[12]C2[13]C[14]N")
        {'12C': 2, '13C': 1, '14N': 1}
    """
    parsed: dict[str, int] = {}
    for mass_number, symbol, count in COMPOSITION_PATTERN.findall(composition):
        parsed[f'{mass_number}{symbol}'] = int(count) if count else 1
    return parsed


def to_formula_string(elements: dict[str, int]) -> str:
    """
    Render element counts back to a formula, in mapping order.
    Zero counts are dropped and a count of 1 is implicit.
    """
    parts: list[str] = []
    for symbol, count in elements.items():
        if count == 0:
            continue
        parts.append(symbol if count == 1 else f'{symbol}{count}')
    return ''.join(parts)


def to_composition_string(isotopes: dict[str, int]) -> str:
    """
    Render isotope-token counts as a composition string, in mapping order.

    Examples:
        >>> to_composition_string({'15N': 1, '13C': 2, '12C': 0})
        '[15]N[13]C2'
    """
    parts: list[str] = []
    for token, count in isotopes.items():
        if not count:
            continue
        mass_number = tracer_mass_number(token)
        symbol = tracer_element(token)
        suffix = str(count) if count > 1 else ''
        parts.append(f'[{mass_number}]{symbol}{suffix}')
    return ''.join(parts)


def reduce_formula(
    formula: str,
    capacity: str,
    tracer1: Optional[str] = None,
    tracer2: Optional[str] = None,
) -> str:
    """
    Remove the atoms that may be replaced by tracers from a formula.

    For each given tracer, the capacity count of the tracer's element is
    subtracted from the formula. Elements absent from the formula are left
    alone. The result may be an empty string if every atom is labelled.

    Args:
        formula: Uncharged formula body, e.g. "C6H12O6"
        capacity: Uncharged capacity formula, e.g. "C6"
        tracer1: First tracer token (e.g. "13C") or None
        tracer2: Second tracer token (e.g. "15N") or None

    Returns:
        Formula string of the unlabelled remainder

    Examples:
        >>> reduce_formula("C6H12O6", "C6", "13C")
        'H12O6'
        >>> reduce_formula("C2N", "C", "13C", "15N")
        'CN'
    """
    elements = formula_map(formula)
    capacities = formula_map(capacity)

    for tracer in (tracer1, tracer2):
        if not tracer:
            continue
        element = tracer_element(tracer)
        if element in elements:
            elements[element] -= capacities.get(element, 0)

    return to_formula_string(elements)


def check_capacity(formula: str, capacity: str) -> None:
    """
    Make sure that no capacity count exceeds the formula count.

    Raises:
        InvalidFormula: If the capacity asks for more atoms than present
    """
    elements = formula_map(formula)
    for symbol, count in formula_map(capacity).items():
        available = elements.get(symbol, 0)
        if count > available:
            raise InvalidFormula(
                f"Capacity '{capacity}' requests {count} {symbol} atom(s), "
                f"but formula '{formula}' only has {available}"
            )
