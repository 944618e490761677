import pytest

from receipt_points.core.errors import ScoringError
from receipt_points.models.enums import ScoringRule
from receipt_points.models.schemas import Receipt
from receipt_points.services.scoring import HANDLERS, score_breakdown, score_receipt

from receipt_fixtures import make_receipt


def _items(n: int):
    return [{"shortDescription": "ab", "price": "1.00"} for _ in range(n)]


def test_target_fixture_scores_28(target_receipt):
    assert score_receipt(target_receipt) == 28
    breakdown = score_breakdown(target_receipt)
    assert breakdown[ScoringRule.RETAILER_NAME] == 6
    assert breakdown[ScoringRule.ITEM_PAIRS] == 10
    assert breakdown[ScoringRule.DESCRIPTION_LENGTH] == 6
    assert breakdown[ScoringRule.ODD_DAY] == 6
    assert breakdown[ScoringRule.ROUND_DOLLAR] == 0
    assert breakdown[ScoringRule.QUARTER_MULTIPLE] == 0
    assert breakdown[ScoringRule.AFTERNOON_WINDOW] == 0


def test_corner_market_fixture_scores_109(corner_market_payload):
    assert score_receipt(Receipt.model_validate(corner_market_payload)) == 109


def test_baseline_receipt_scores_zero():
    assert score_receipt(make_receipt()) == 0


def test_breakdown_covers_every_rule_and_sums_to_score(target_receipt):
    breakdown = score_breakdown(target_receipt)
    assert set(breakdown) == set(HANDLERS) == set(ScoringRule)
    assert sum(breakdown.values()) == score_receipt(target_receipt)


@pytest.mark.parametrize(
    "retailer,expected",
    [("Target", 6), ("M&M Corner Market", 14), ("a-b c_d", 4), ("tegraT", 6), ("123", 3)],
)
def test_retailer_name_counts_alphanumerics(retailer, expected):
    assert score_breakdown(make_receipt(retailer=retailer))[ScoringRule.RETAILER_NAME] == expected


@pytest.mark.parametrize(
    "total,round_dollar,quarter",
    [("100.00", 50, 25), ("100.10", 0, 0), ("100.25", 0, 25), ("0.75", 0, 25), ("0.00", 50, 25)],
)
def test_total_rules(total, round_dollar, quarter):
    breakdown = score_breakdown(make_receipt(total=total))
    assert breakdown[ScoringRule.ROUND_DOLLAR] == round_dollar
    assert breakdown[ScoringRule.QUARTER_MULTIPLE] == quarter


@pytest.mark.parametrize("count,expected", [(1, 0), (2, 5), (3, 5), (4, 10), (7, 15)])
def test_item_pairs(count, expected):
    receipt = make_receipt(items=_items(count))
    assert score_breakdown(receipt)[ScoringRule.ITEM_PAIRS] == expected


def test_description_length_multiple_of_three_rounds_price_up():
    # "Mountain Dew 12PK" is 17 characters; padded to 18 it qualifies
    qualifying = make_receipt(items=[{"shortDescription": "Mountain Dew 12PK1", "price": "6.49"}])
    assert score_breakdown(qualifying)[ScoringRule.DESCRIPTION_LENGTH] == 2
    other = make_receipt(items=[{"shortDescription": "Mountain Dew 12PK", "price": "6.49"}])
    assert score_breakdown(other)[ScoringRule.DESCRIPTION_LENGTH] == 0


def test_description_length_uses_trimmed_description():
    receipt = make_receipt(items=[{"shortDescription": "   Klarbrunn 12-PK 12 FL OZ  ", "price": "12.00"}])
    assert score_breakdown(receipt)[ScoringRule.DESCRIPTION_LENGTH] == 3


def test_description_length_exact_multiple_is_not_rounded_up():
    receipt = make_receipt(items=[{"shortDescription": "abc", "price": "5.00"}])
    assert score_breakdown(receipt)[ScoringRule.DESCRIPTION_LENGTH] == 1


@pytest.mark.parametrize("purchase_date,expected", [("2022-01-01", 6), ("2022-01-02", 0), ("2022-01-31", 6)])
def test_odd_day(purchase_date, expected):
    assert score_breakdown(make_receipt(purchaseDate=purchase_date))[ScoringRule.ODD_DAY] == expected


@pytest.mark.parametrize(
    "purchase_time,expected",
    [("13:59", 0), ("14:00", 0), ("14:01", 10), ("15:00", 10), ("15:59", 10), ("16:00", 0)],
)
def test_afternoon_window_boundaries(purchase_time, expected):
    receipt = make_receipt(purchaseTime=purchase_time)
    assert score_breakdown(receipt)[ScoringRule.AFTERNOON_WINDOW] == expected


@pytest.mark.parametrize(
    "overrides",
    [
        {"total": "abc"},
        {"purchaseDate": "not-a-date"},
        {"purchaseTime": "25:00"},
        {"items": [{"shortDescription": "abc", "price": "free"}]},
    ],
)
def test_unparseable_fields_raise_scoring_error(overrides):
    with pytest.raises(ScoringError):
        score_receipt(make_receipt(**overrides))


def test_score_is_never_negative(target_receipt, corner_market_payload):
    for receipt in (target_receipt, Receipt.model_validate(corner_market_payload), make_receipt()):
        points = score_receipt(receipt)
        assert isinstance(points, int)
        assert points >= 0


@pytest.mark.parametrize(
    "total,round_dollar,quarter",
    [
        ("1234567890123456789012345678.01", 0, 0),
        ("1234567890123456789012345678.00", 50, 25),
        ("99999999999999999999999999999999.75", 0, 25),
    ],
)
def test_total_rules_exact_for_long_amounts(total, round_dollar, quarter):
    breakdown = score_breakdown(make_receipt(total=total))
    assert breakdown[ScoringRule.ROUND_DOLLAR] == round_dollar
    assert breakdown[ScoringRule.QUARTER_MULTIPLE] == quarter


def test_description_length_rounds_up_long_prices():
    receipt = make_receipt(items=[{"shortDescription": "abc", "price": "1000000000000000000000000000.01"}])
    assert score_breakdown(receipt)[ScoringRule.DESCRIPTION_LENGTH] == 2 * 10**26 + 1
