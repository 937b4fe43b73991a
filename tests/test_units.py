"""Tests for weight unit conversions."""

from liftplan.utils.units import (
    WeightUnit,
    kg_to_lbs,
    lbs_to_kg,
    parse_unit,
    select_display_value,
    to_canonical,
)


class TestConversions:
    """Tests for kg/lbs conversion."""

    def test_kg_to_lbs(self):
        """Test kilograms to pounds."""
        assert kg_to_lbs(100) == 220.46
        assert kg_to_lbs(0) == 0

    def test_lbs_to_kg(self):
        """Test pounds to kilograms."""
        assert lbs_to_kg(220.46) == 100.0
        assert lbs_to_kg(45) == 20.41

    def test_none_passes_through(self):
        """Test absent input yields absent output, not zero."""
        assert kg_to_lbs(None) is None
        assert lbs_to_kg(None) is None


class TestSelectDisplayValue:
    """Tests for select_display_value."""

    def test_preferred_kg(self):
        """Test stored kg value is used for kg display."""
        assert select_display_value(100, 225, WeightUnit.KG) == 100

    def test_preferred_lbs(self):
        """Test stored lbs value is used as-is for lbs display."""
        assert select_display_value(100, 225, WeightUnit.LBS) == 225

    def test_falls_back_to_conversion(self):
        """Test the missing preferred value is converted from the other."""
        assert select_display_value(100, None, "lbs") == 220.46
        assert select_display_value(None, 220.46, "kg") == 100.0

    def test_both_absent(self):
        """Test nothing stored gives None."""
        assert select_display_value(None, None, WeightUnit.LBS) is None


class TestToCanonical:
    """Tests for to_canonical."""

    def test_kg_unchanged(self):
        """Test kg input is already canonical."""
        assert to_canonical(80, WeightUnit.KG) == 80

    def test_lbs_converted(self):
        """Test lbs input is converted to kg."""
        assert to_canonical(220.46, "lbs") == 100.0


class TestParseUnit:
    """Tests for parse_unit."""

    def test_known_units(self):
        """Test enum members and names in any case."""
        assert parse_unit(WeightUnit.LBS) == WeightUnit.LBS
        assert parse_unit("LBS") == WeightUnit.LBS
        assert parse_unit("kg") == WeightUnit.KG

    def test_unknown_unit_falls_back_to_kg(self):
        """Test the converters accept unknown units without raising."""
        assert parse_unit("stone") == WeightUnit.KG
        assert parse_unit(None) == WeightUnit.KG
        assert select_display_value(100, 225, "stone") == 100
        assert to_canonical(80, "stone") == 80
