import pytest
from meal_scheduler.models import Dimension, Unit
from meal_scheduler.units import (
    IncompatibleUnitsError,
    convert,
    normalize_unit,
    same_dimension,
    to_base_unit,
)


class TestNormalizeUnit:
    def test_synonyms(self):
        assert normalize_unit("grams") == Unit.G
        assert normalize_unit("Kilograms") == Unit.KG
        assert normalize_unit("kgs") == Unit.KG
        assert normalize_unit("milliliters") == Unit.ML
        assert normalize_unit("cc") == Unit.ML
        assert normalize_unit("liters") == Unit.L
        assert normalize_unit("tablespoons") == Unit.TBSP
        assert normalize_unit("teaspoons") == Unit.TSP
        assert normalize_unit("cups") == Unit.CUP

    def test_count_synonyms(self):
        for raw in ["piece", "pieces", "pc", "pcs", "ea", "each", "whole"]:
            assert normalize_unit(raw) == Unit.UNIT

    def test_whitespace_case_and_period(self):
        assert normalize_unit("  TBSP. ") == Unit.TBSP

    def test_unknown_defaults_to_count(self):
        assert normalize_unit("pinch") == Unit.UNIT
        assert normalize_unit("") == Unit.UNIT
        assert normalize_unit(None) == Unit.UNIT

    def test_unit_passthrough(self):
        assert normalize_unit(Unit.CUP) is Unit.CUP


class TestConvert:
    def test_identity(self):
        assert convert(3.5, "g", "g") == 3.5

    def test_mass(self):
        assert convert(1, "kg", "g") == 1000
        assert convert(250, "g", "kg") == pytest.approx(0.25)

    def test_volume(self):
        assert convert(1, "cup", "ml") == 240
        assert convert(1, "tbsp", "tsp") == pytest.approx(3)
        assert convert(1.5, "l", "ml") == 1500

    def test_round_trip(self):
        assert convert(convert(1, "kg", "g"), "g", "kg") == 1
        for a, b in [("cup", "tbsp"), ("l", "tsp"), ("ml", "cup"), ("g", "kg")]:
            assert convert(convert(7.3, a, b), b, a) == pytest.approx(7.3)

    def test_accepts_unit_members(self):
        assert convert(2, Unit.TBSP, Unit.ML) == 30

    def test_cross_dimension_raises(self):
        with pytest.raises(IncompatibleUnitsError, match="Incompatible unit conversion"):
            convert(1, "g", "ml")
        with pytest.raises(IncompatibleUnitsError):
            convert(1, "ml", "unit")

    def test_error_is_value_error(self):
        with pytest.raises(ValueError) as exc:
            convert(1, "kg", "cup")
        assert exc.value.from_unit == Unit.KG
        assert exc.value.to_unit == Unit.CUP


class TestDimensions:
    def test_unit_dimensions(self):
        assert Unit.KG.dimension == Dimension.MASS
        assert Unit.TSP.dimension == Dimension.VOLUME
        assert Unit.UNIT.dimension == Dimension.COUNT

    def test_same_dimension(self):
        assert same_dimension(Unit.CUP, Unit.L)
        assert not same_dimension(Unit.G, Unit.ML)

    def test_to_base_unit(self):
        assert to_base_unit(2, "kg") == (2000, Unit.G)
        assert to_base_unit(2, "tbsp") == (30, Unit.ML)
        assert to_base_unit(3, "each") == (3, Unit.UNIT)
