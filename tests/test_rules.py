"""
Unit tests for the rule catalog predicates.
"""

from datetime import date

import pytest

from medbook.rules import (
    int_between,
    is_clock_time,
    is_email,
    is_iso_date,
    is_non_blank,
    is_object_id,
    is_password,
    is_phone,
    is_text_list,
    normalize_email,
    one_of,
    parse_iso_date,
    to_int,
)


# ── Tests: email / password ──────────────────────────────────────────

def test_is_email_accepts_standard_address():
    assert is_email("jane.doe@clinic.org")
    assert is_email("  Jane.Doe@Clinic.org ")


@pytest.mark.parametrize("value", ["bad", "a@", "@clinic.org", "", None, 42, ["x@clinic.org"]])
def test_is_email_rejects_malformed_without_raising(value):
    assert is_email(value) is False


def test_normalize_email_lowercases_and_strips():
    assert normalize_email("  Jane.Doe@Clinic.ORG ") == "jane.doe@clinic.org"


def test_password_minimum_length_six():
    assert is_password("123456")
    assert is_password("x" * 500)
    assert not is_password("12345")
    assert not is_password(123456)


# ── Tests: names / phone / ids ───────────────────────────────────────

def test_non_blank_after_trim():
    assert is_non_blank(" Ann ")
    assert not is_non_blank("   ")
    assert not is_non_blank(None)


@pytest.mark.parametrize("value", ["+1 (555) 123-4567", "5551234567", "020 7946 0958"])
def test_phone_valid(value):
    assert is_phone(value)


@pytest.mark.parametrize("value", ["call me", "555-CALL", "", "++1555", "555 1234\n"])
def test_phone_invalid(value):
    assert not is_phone(value)


def test_object_id_shape():
    assert is_object_id("64b7f0c2a1d3e4f5a6b7c8d9")
    assert is_object_id("64B7F0C2A1D3E4F5A6B7C8D9")
    assert not is_object_id("64b7f0c2a1d3e4f5a6b7c8d")   # 23 chars
    assert not is_object_id("zzb7f0c2a1d3e4f5a6b7c8d9")
    assert not is_object_id("64b7f0c2a1d3e4f5a6b7c8d9\n")
    assert not is_object_id(None)


# ── Tests: dates / times ─────────────────────────────────────────────

def test_iso_date_variants():
    assert parse_iso_date("2025-03-14") == date(2025, 3, 14)
    assert parse_iso_date("2025-03-14T09:30:00Z") == date(2025, 3, 14)
    assert parse_iso_date("2025-03-14T09:30:00+02:00") == date(2025, 3, 14)
    assert not is_iso_date("14/03/2025")
    assert not is_iso_date("2025-02-30")
    assert not is_iso_date(20250314)


@pytest.mark.parametrize("value", ["9:00 AM", "09:00 AM", "12:59 PM", "1:05 PM"])
def test_clock_time_valid(value):
    assert is_clock_time(value)


@pytest.mark.parametrize("value", ["13:00 PM", "00:30 AM", "9:00 am", "9:0 AM", "09:00AM", "9:60 AM",
                                   "09:00 AM\n"])
def test_clock_time_invalid(value):
    assert not is_clock_time(value)


# ── Tests: enums / integers ──────────────────────────────────────────

def test_one_of_membership():
    check = one_of({"low", "high"})
    assert check("low")
    assert not check("LOW")
    assert not check(["low"])


def test_to_int_accepts_int_and_numeric_text():
    assert to_int(5) == 5
    assert to_int("42") == 42
    assert to_int(3.0) == 3
    assert to_int(True) is None
    assert to_int("4.5") is None
    assert to_int("abc") is None
    assert to_int("1" * 5000) is None


def test_int_between_bounds():
    check = int_between(1, 100)
    assert check(1) and check("100")
    assert not check(0)
    assert not check(101)
    assert int_between(1)(10 ** 6)
    assert not int_between(1)("9" * 5000)


def test_is_text_list():
    assert is_text_list(["cough", "fever"])
    assert is_text_list([])
    assert not is_text_list("headache")
    assert not is_text_list(5)
    assert not is_text_list(["cough", 3])
