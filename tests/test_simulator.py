"""
End-to-end tests for traced isotope pattern simulation
"""
import numpy as np
import pytest

import isotrace
from isotrace.core import simulator as simulator_module
from isotrace import (
    InvalidFormula,
    InvalidRates,
    PatternGenerationConfig,
    TracedPatternSimulator,
    UnknownIsotope,
    simulate_traced_pattern,
)
from isotrace.isotopes._reference import IsotopeReference
from isotrace.utils.formulae import formula_map, isotope_map, tracer_element

MIN_ABUNDANCE = 1e-4
INTENSITY_SCALE = 1.0
MZ_TOLERANCE = 1e-4


def _simulate(formula, capacity, tracer1, tracer2, inc1, inc2, inc_both,
              min_abundance=MIN_ABUNDANCE):
    return simulate_traced_pattern(
        formula, capacity, tracer1, tracer2, inc1, inc2, inc_both,
        min_abundance=min_abundance,
        intensity_scale=INTENSITY_SCALE,
        mz_tolerance=MZ_TOLERANCE,
    )


def _finalize(pattern):
    return pattern.round_mz(6).round_intensities(6).to_mid()


class TestScenarios:
    """
    Single and double tracer experiments on one- and two-atom molecules
    """

    def test_13c_half_incorporation(self):
        """
        13C tracing with a (natural abundance corrected) incorporation of 50%
        """
        pattern = _finalize(_simulate("C", "C", "13C", None, 0.5, 0, 0))

        assert pattern.size == 2
        assert pattern.mz[0] == pytest.approx(12.0000, abs=1e-4)
        assert pattern.mz[1] == pytest.approx(13.0034, abs=1e-4)
        # allow for natural abundance
        assert pattern.intensity[0] == pytest.approx(0.5, abs=0.01)
        assert pattern.intensity[1] == pytest.approx(0.5, abs=0.01)
        assert pattern.heavy_isotopes == ("", "[13]C")

    def test_unused_tracer_is_ignored(self):
        """
        15N can not label anything without N capacity
        """
        with_15n = _finalize(_simulate("C", "C", "13C", "15N", 0.5, 0.5, 0))
        without_15n = _finalize(_simulate("C", "C", "13C", None, 0.5, 0, 0))

        assert with_15n.size == 2
        assert with_15n.intensity[0] == pytest.approx(0.5, abs=0.01)
        assert with_15n.intensity[1] == pytest.approx(0.5, abs=0.01)
        assert np.allclose(with_15n.mz, without_15n.mz)
        assert np.allclose(with_15n.intensity, without_15n.intensity, atol=1e-6)
        assert with_15n.heavy_isotopes == without_15n.heavy_isotopes

    def test_full_incorporation(self):
        pattern = _finalize(_simulate("C", "C", "13C", None, 1, 0, 0))

        assert pattern.size == 2
        assert pattern.intensity[0] == 0
        assert pattern.intensity[1] == 1

    def test_carbon_capacity_with_nitrogen(self):
        pattern = _finalize(_simulate("CN", "C", "13C", "15N", 0.5, 0.5, 0))

        assert pattern.size == 4
        assert pattern.mz.tolist() == pytest.approx(
            [26.0031, 27.0001, 27.0064, 28.0035], abs=1e-4
        )
        assert pattern.intensity[0] == pytest.approx(0.5, abs=0.01)
        assert pattern.intensity[2] == pytest.approx(0.5, abs=0.01)
        # Tracer isotopes are appended after the natural ones
        assert pattern.heavy_isotopes == ("", "[15]N", "[13]C", "[15]N[13]C")

    def test_nitrogen_capacity(self):
        pattern = _finalize(_simulate("CN", "N", "13C", "15N", 0.5, 0.5, 0))

        assert pattern.size == 4
        assert pattern.intensity[0] == pytest.approx(0.5, abs=0.01)
        assert pattern.intensity[1] == pytest.approx(0.5, abs=0.01)

    def test_double_tracer(self):
        pattern = _finalize(_simulate("CN", "CN", "13C", "15N", 0.2, 0.2, 0.2))

        assert pattern.size == 4
        assert pattern.intensity.tolist() == pytest.approx(
            [0.4, 0.2, 0.2, 0.2], abs=0.01
        )
        assert pattern.heavy_isotopes[:3] == ("", "[15]N", "[13]C")

    def test_natural_pattern_only(self):
        pattern = _finalize(
            _simulate("CN", "CN", None, None, 0, 0, 0, min_abundance=1e-5)
        )

        assert pattern.size == 4
        assert pattern.intensity.tolist() == pytest.approx(
            [0.9857, 0.0036, 0.0107, 0.0000], abs=2e-4
        )
        assert pattern.heavy_isotopes == ("", "[15]N", "[13]C", "[13]C[15]N")


class TestPatternProperties:

    def setup_method(self):
        self.reference = IsotopeReference()
        self.pattern = _simulate("C3N2", "C2N", "13C", "15N", 0.3, 0.2, 0.1)

    def test_normalized_to_scale(self):
        assert float(self.pattern.intensity.max()) == pytest.approx(INTENSITY_SCALE)

    def test_sorted_by_mass(self):
        assert np.all(np.diff(self.pattern.mz) > 0)

    def test_mid(self):
        mid = self.pattern.to_mid()
        assert float(mid.intensity.sum()) == pytest.approx(1.0, abs=1e-6)
        assert np.array_equal(mid.mz, self.pattern.mz)
        assert mid.isotope_composition == self.pattern.isotope_composition
        assert mid.heavy_isotopes == self.pattern.heavy_isotopes

    def test_heavy_isotopes_are_a_subset(self):
        for composition, heavy in zip(
            self.pattern.isotope_composition, self.pattern.heavy_isotopes,
        ):
            isotopes = isotope_map(composition)
            for token, count in isotope_map(heavy).items():
                assert isotopes[token] == count
                element = tracer_element(token)
                assert int(token[:-len(element)]) > \
                    self.reference.lightest_natural_mass_number(element)

    def test_compositions_conserve_atoms(self):
        """
        Labelling swaps atoms, so every composition accounts for exactly
        the atoms of the molecule
        """
        formula = formula_map("C3N2")
        for composition in self.pattern.isotope_composition:
            atoms: dict[str, int] = {}
            for token, count in isotope_map(composition).items():
                element = tracer_element(token)
                atoms[element] = atoms.get(element, 0) + count
            assert atoms == formula

    def test_tracer_count_within_capacity(self):
        """
        Without natural 13C in the remainder, a composition holds at most
        the capacity of 13C atoms
        """
        pattern = _simulate("C3", "C2", "13C", None, 0.5, 0, 0, min_abundance=0.1)
        capacity = formula_map("C2")
        for composition in pattern.isotope_composition:
            assert isotope_map(composition).get("13C", 0) <= capacity["C"]

    def test_round_mz_keeps_order(self):
        rounded = self.pattern.round_mz(6)
        assert np.all(np.diff(rounded.mz) > 0)
        assert float(rounded.intensity.sum()) == pytest.approx(
            float(self.pattern.intensity.sum()), rel=1e-5
        )

    def test_fully_labelled_peak(self):
        """
        Doubly labelled molecules without natural remainder sit at the
        all-tracer mass
        """
        pattern = _simulate("CN", "CN", "13C", "15N", 0, 0, 1)
        expected = (
            self.reference.exact_mass("C", 13)
            + self.reference.exact_mass("N", 15)
        )
        labelled = np.argmax(pattern.intensity)
        assert pattern.mz[labelled] == pytest.approx(expected)
        assert isotope_map(pattern.heavy_isotopes[labelled]) == {"13C": 1, "15N": 1}


class TestSimulator:

    def test_charged_formula(self):
        """
        The charge is carried into the reduced formula of the labelled part
        """
        pattern = _finalize(_simulate("[CN]-", "C", "13C", None, 0.5, 0, 0))
        assert pattern.size == 4
        assert pattern.mz[0] == pytest.approx(26.003623, abs=1e-5)
        assert pattern.intensity[0] == pytest.approx(0.5, abs=0.01)
        assert pattern.intensity[2] == pytest.approx(0.5, abs=0.01)
        assert pattern.heavy_isotopes == ("", "[15]N", "[13]C", "[15]N[13]C")

    def test_config_defaults(self):
        simulator = TracedPatternSimulator(
            config=PatternGenerationConfig(intensity_scale=100.0)
        )
        pattern = simulator.simulate("C", "C", "13C", tracer1_inc=0.5)
        assert float(pattern.intensity.max()) == pytest.approx(100.0)

    def test_injected_reference(self):
        reference = IsotopeReference()
        simulator = TracedPatternSimulator(reference=reference)
        assert simulator.reference is reference

    def test_convenience_function_uses_singleton(self):
        simulate_traced_pattern("C", "C")
        first = isotrace._default_simulator
        simulate_traced_pattern("C", "C")
        assert isotrace._default_simulator is first

    def test_no_tracers_keeps_natural_pattern(self):
        pattern = simulate_traced_pattern("C", "C")
        assert pattern.heavy_isotopes == ("", "[13]C")
        assert float(pattern.intensity[0]) == pytest.approx(1.0)


class TestParameterErrors:

    @pytest.mark.parametrize("formula,capacity,tracer1,tracer2", [
        ("c", "C", "13C", None),
        ("C", "C+", "13C", None),
        ("C", "[C]", "13C", None),
        ("C", "C", "C13", None),
        ("C", "C", "13C", "N"),
    ])
    def test_invalid_formula(self, formula, capacity, tracer1, tracer2):
        with pytest.raises(InvalidFormula):
            _simulate(formula, capacity, tracer1, tracer2, 0.5, 0, 0)

    def test_capacity_larger_than_formula(self):
        with pytest.raises(InvalidFormula, match="Capacity"):
            _simulate("CN", "C2", "13C", None, 0.5, 0, 0)

    @pytest.mark.parametrize("rates", [
        (0.5, 0.5, 0.5),
        (1.1, 0, 0),
        (-0.1, 0, 0),
        (0.5, -0.2, 0.3),
    ])
    def test_invalid_rates(self, rates):
        with pytest.raises(InvalidRates):
            _simulate("CN", "CN", "13C", "15N", *rates)

    def test_unknown_tracer(self):
        with pytest.raises(UnknownIsotope):
            _simulate("C", "C", "99C", None, 0.5, 0, 0)

    def test_same_tracer_element_twice(self):
        with pytest.raises(InvalidFormula, match="different elements"):
            _simulate("C2N", "C", "13C", "13C", 0.2, 0.2, 0.2)

    @pytest.mark.parametrize("kwargs", [
        {"intensity_scale": -1.0},
        {"min_abundance": 0.0},
        {"mz_tolerance": -1e-3},
    ])
    def test_invalid_settings(self, kwargs):
        with pytest.raises(ValueError):
            simulate_traced_pattern("C", "C", "13C", None, 0.5, 0, 0, **kwargs)


class TestIntensityConservation:
    """
    Before normalisation, the sub-populations add up to the whole pool.
    Each natural pattern has its tallest peak at its weight, so the
    isotope tails push the total slightly above 1.
    """

    @pytest.fixture(autouse=True)
    def skip_normalisation(self, monkeypatch):
        monkeypatch.setattr(
            simulator_module, "normalize_pattern", lambda pattern, scale: pattern,
        )

    @pytest.mark.parametrize("formula,capacity,tracer1,tracer2,rates", [
        ("C", "C", "13C", None, (0.5, 0, 0)),
        ("CN", "CN", "13C", "15N", (0.2, 0.2, 0.2)),
        ("C3N2", "C2N", "13C", "15N", (0.3, 0.2, 0.1)),
    ])
    def test_merged_intensities_sum_to_one(
        self, formula, capacity, tracer1, tracer2, rates,
    ):
        pattern = _simulate(formula, capacity, tracer1, tracer2, *rates)
        total = float(pattern.intensity.sum(dtype=np.float64))
        assert total >= 1.0 - 1e-6
        assert total == pytest.approx(1.0, abs=0.05)
