import pytest

from catalog_matcher.services import units


class TestNormalize:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("1,5 LT", "1.5L"),
            ("400GR", "400G"),
            ("400 gramos", "400G"),
            ("1K", "1KG"),
            ("1 kilo", "1KG"),
            ("KG", "KG"),
            ("500 cc", "500ML"),
            ("2 litros", "2L"),
            ("250g", "250G"),
            ("750ml", "750ML"),
        ],
    )
    def test_canonical_measures(self, raw, expected):
        assert units.normalize(raw) == expected

    @pytest.mark.parametrize("raw", ["", None, "   ", "sobre", "pack", "docena", "12 x"])
    def test_non_measures_become_empty(self, raw):
        assert units.normalize(raw) == ""

    def test_output_stays_in_vocabulary(self):
        for raw in ["1,5 LT", "3 kilos", "900 CC", "x unidad", "abc"]:
            result = units.normalize(raw)
            assert result == "" or result.endswith(("L", "ML", "KG", "G"))


class TestIsCountUnit:
    @pytest.mark.parametrize("raw", ["sobre", "Unidad", "PAR", "paquete x 3", "pack", "tableta", "blister", "Frasco"])
    def test_count_units(self, raw):
        assert units.is_count_unit(raw) is True

    @pytest.mark.parametrize("raw", ["1.5L", "400g", "", None])
    def test_measures_are_not_count_units(self, raw):
        assert units.is_count_unit(raw) is False


class TestStandardizeForComparison:
    def test_volume_to_millilitres(self):
        assert units.standardize_for_comparison("1,5 LT") == "1500ML"
        assert units.standardize_for_comparison("1500 cc") == "1500ML"

    def test_weight_to_grams(self):
        assert units.standardize_for_comparison("1KG") == "1000G"
        assert units.standardize_for_comparison("0,5 kilos") == "500G"
        assert units.standardize_for_comparison("250GR") == "250G"

    def test_equivalent_measures_compare_equal(self):
        assert units.standardize_for_comparison("1L") == units.standardize_for_comparison("1000ml")

    def test_without_amount_or_unparseable(self):
        assert units.standardize_for_comparison("KG") == "KG"
        assert units.standardize_for_comparison("sobre") == ""
