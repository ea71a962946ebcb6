"""
Unit tests for phone normalization.
"""
import pytest
from gti.services.phone import (
    build_lookup_variants,
    build_phone_variants,
    normalize_to_e164,
    strip_to_digits,
)


class TestStripToDigits:
    """Tests for strip_to_digits."""

    def test_removes_formatting(self):
        assert strip_to_digits('(555) 123-4567') == '5551234567'
        assert strip_to_digits('+1 555.123.4567') == '15551234567'

    def test_empty_input(self):
        assert strip_to_digits('') == ''
        assert strip_to_digits(None) == ''

    def test_no_digits(self):
        assert strip_to_digits('call me') == ''

    def test_non_string_input(self):
        assert strip_to_digits(5551234567) == '5551234567'


class TestNormalizeToE164:
    """Tests for normalize_to_e164."""

    def test_ten_digits_get_country_code(self):
        assert normalize_to_e164('5551234567') == '+15551234567'
        assert normalize_to_e164('(555) 123-4567') == '+15551234567'

    def test_eleven_digits_starting_with_one(self):
        assert normalize_to_e164('15551234567') == '+15551234567'
        assert normalize_to_e164('+1 (555) 123-4567') == '+15551234567'

    @pytest.mark.parametrize('value', [
        '',
        None,
        '12345',
        '25551234567',  # 11 digits, wrong country code
        '555123456789',
        'not a phone',
    ])
    def test_unnormalizable_returns_empty(self, value):
        assert normalize_to_e164(value) == ''


class TestBuildPhoneVariants:
    """Tests for build_phone_variants."""

    def test_ten_digit_number(self):
        variants = build_phone_variants('5551234567')
        assert variants == ['5551234567', '+15551234567', '15551234567']

    def test_formatted_number_keeps_raw_form(self):
        variants = build_phone_variants('  (555) 123-4567 ')
        assert variants[0] == '(555) 123-4567'
        assert '5551234567' in variants
        assert '+15551234567' in variants
        assert '15551234567' in variants

    def test_eleven_digit_number(self):
        variants = build_phone_variants('+15551234567')
        assert variants == ['+15551234567', '15551234567']

    def test_other_lengths_only_raw_and_digits(self):
        assert build_phone_variants('+44 20 7946 0958') == ['+44 20 7946 0958', '442079460958']

    def test_empty_input(self):
        assert build_phone_variants('') == []
        assert build_phone_variants(None) == []
        assert build_phone_variants('   ') == []


class TestBuildLookupVariants:
    """Tests for build_lookup_variants."""

    def test_union_without_duplicates(self):
        variants = build_lookup_variants('5551234567', '+15551234567')
        assert sorted(variants) == sorted(['5551234567', '+15551234567', '15551234567'])
        assert len(variants) == len(set(variants))
