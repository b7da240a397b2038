import pytest

from nextclade_to_maple.models import MapleDiff
from nextclade_to_maple.notation import (
    NotationError,
    deletions_to_diffs,
    missing_to_diffs,
    non_acgtns_to_diffs,
    substitutions_to_diffs,
)
from nextclade_to_maple.validation import ConfigurationError


def test_substitutions_parse_to_zero_based_lowercase():
    diffs = substitutions_to_diffs("C241T,T670G,a23403g")
    assert diffs == [
        MapleDiff(start=240, length=1, symbol="t"),
        MapleDiff(start=669, length=1, symbol="g"),
        MapleDiff(start=23402, length=1, symbol="g"),
    ]


def test_empty_columns_yield_nothing():
    assert substitutions_to_diffs("") == []
    assert deletions_to_diffs("") == []
    assert missing_to_diffs("") == []
    assert non_acgtns_to_diffs("") == []
    # stray commas are empty tokens
    assert deletions_to_diffs("5,,7") == [MapleDiff(4, 1, "-"), MapleDiff(6, 1, "-")]


def test_deletions_ranges_and_single_positions():
    assert deletions_to_diffs("123-125,2000") == [
        MapleDiff(start=122, length=3, symbol="-"),
        MapleDiff(start=1999, length=1, symbol="-"),
    ]


def test_missing_ranges_and_single_positions():
    assert missing_to_diffs("1-54,7201,29837-29903") == [
        MapleDiff(start=0, length=54, symbol="n"),
        MapleDiff(start=7200, length=1, symbol="n"),
        MapleDiff(start=29836, length=67, symbol="n"),
    ]


def test_non_acgtns_keep_ambiguity_code():
    assert non_acgtns_to_diffs("Y:4321,R:12846-12847,k:5") == [
        MapleDiff(start=4320, length=1, symbol="y"),
        MapleDiff(start=12845, length=2, symbol="r"),
        MapleDiff(start=4, length=1, symbol="k"),
    ]


@pytest.mark.parametrize(
    "token",
    ["N241T", "C241N", "C241", "CT", "C24xT", "C-1T", "C0T", "C 241T"],
)
def test_bad_substitutions_are_fatal(token):
    with pytest.raises(NotationError):
        substitutions_to_diffs(token)


@pytest.mark.parametrize("token", ["12-", "-5", "a-5", "10-9", "0", "1-2-3", "+5"])
def test_bad_ranges_are_fatal(token):
    with pytest.raises(NotationError):
        deletions_to_diffs(token)
    with pytest.raises(NotationError):
        missing_to_diffs(token)


@pytest.mark.parametrize("token", ["Y4321", ":4321", "YR:4321", "Y:", "Y:x-3"])
def test_bad_non_acgtns_are_fatal(token):
    with pytest.raises(NotationError):
        non_acgtns_to_diffs(token)


def test_notation_error_is_configuration_error():
    with pytest.raises(ConfigurationError, match="C241N"):
        substitutions_to_diffs("C241N")
