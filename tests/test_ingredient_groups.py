"""Unit tests for protein family normalization."""

from meal_scheduler.ingredient_groups import normalize_protein_family


class TestNormalizeProteinFamily:
    def test_poultry(self):
        assert normalize_protein_family("chicken") == "poultry"
        assert normalize_protein_family("turkey") == "poultry"

    def test_case_and_whitespace(self):
        assert normalize_protein_family(" Chicken ") == "poultry"
        assert normalize_protein_family("SALMON") == "seafood"

    def test_none_values(self):
        assert normalize_protein_family(None) is None
        assert normalize_protein_family("") is None
        assert normalize_protein_family("none") is None

    def test_plant_is_legumes(self):
        assert normalize_protein_family("plant") == "legumes"
        assert normalize_protein_family("lentils") == "legumes"

    def test_unmapped_kept(self):
        assert normalize_protein_family("Seitan") == "seitan"

    def test_shared_family_across_tags(self):
        assert normalize_protein_family("bacon") == normalize_protein_family("chorizo") == "pork"
