import pytest

from modules.documents.services.case_id import format_case_id, next_case_id_from


def test_first_case_id_is_000001():
    assert next_case_id_from([]) == "000001"


@pytest.mark.parametrize("existing, expected", [
    (["000001", "000002", "000005"], "000006"),
    (["000099"], "000100"),
    (["999999"], "1000000"),
    (["1000000", "000007"], "1000001"),
])
def test_next_case_id_is_highest_plus_one(existing, expected):
    assert next_case_id_from(existing) == expected


def test_non_numeric_and_short_ids_are_ignored():
    assert next_case_id_from(["abc", "12", "CASE-9", "", None, "000003"]) == "000004"


def test_format_case_id_pads_to_six_digits():
    assert format_case_id(42) == "000042"
    assert format_case_id(1234567) == "1234567"
