from meal_scheduler.constraints import (
    candidate_tokens,
    expand_forbid_terms,
    is_hard_blocked,
    tokenize,
)
from meal_scheduler.models import Candidate


class TestTokenize:
    def test_punctuation_and_case(self):
        assert tokenize("Mac & Cheese (Baked!)") == ["mac", "cheese", "baked"]

    def test_empty(self):
        assert tokenize("") == []

    def test_candidate_tokens(self):
        c = Candidate(id="a", title="Pad Thai", minutes=20, cost=6,
                      ingredients=("rice noodles", "peanuts"), tags=("prot:shrimp",))
        assert candidate_tokens(c) == ("pad", "thai", "rice", "noodles", "peanuts", "prot", "shrimp")


class TestIsHardBlocked:
    def test_exact_token(self):
        assert is_hard_blocked(("beef", "stew"), ["beef"])

    def test_no_substring_match(self):
        assert not is_hard_blocked(("beefsteak", "tomato"), ["beef"])
        assert not is_hard_blocked(("eggplant",), ["egg"])

    def test_multi_word_contiguous(self):
        tokens = tuple(tokenize("pasta with pine nuts and sun dried tomato"))
        assert is_hard_blocked(tokens, ["pine nuts"])
        assert is_hard_blocked(tokens, ["sun dried tomato"])
        assert not is_hard_blocked(tokens, ["pine tomato"])

    def test_empty_forbid_list(self):
        assert not is_hard_blocked(("anything",), [])

    def test_blank_terms_ignored(self):
        assert not is_hard_blocked(("rice",), ["", "  "])


class TestExpandForbidTerms:
    def test_vegetarian(self):
        terms = expand_forbid_terms(diet="vegetarian")
        assert "chicken" in terms
        assert "cheese" not in terms

    def test_vegan_extends_vegetarian(self):
        terms = expand_forbid_terms(diet="Vegan")
        assert {"chicken", "cheese", "egg", "honey"} <= set(terms)

    def test_allergen_aliases(self):
        terms = expand_forbid_terms(allergens=["peanuts", "milk"])
        assert "peanut" in terms
        assert "yogurt" in terms

    def test_unknown_allergen_blocks_own_name(self):
        assert expand_forbid_terms(allergens=["Kiwi"]) == ["kiwi"]

    def test_religious(self):
        assert "pork" in expand_forbid_terms(religious="halal")
        assert "shrimp" in expand_forbid_terms(religious="kosher")

    def test_dislikes_sorted_deduped(self):
        terms = expand_forbid_terms(allergens=["egg"], dislikes=["Cilantro", "egg", " "])
        assert terms == sorted(set(terms))
        assert "cilantro" in terms
        assert terms.count("egg") == 1

    def test_nothing(self):
        assert expand_forbid_terms() == []
