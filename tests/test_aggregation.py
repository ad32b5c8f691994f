"""Tests for record filtering, sorting and aggregation."""

from datetime import date
from decimal import Decimal

from finreport.domain import aggregation
from finreport.domain.entities import DateInterval, RecordKind, SortOrder, Statistics

JANUARY_2024 = DateInterval.from_dates(date(2024, 1, 1), date(2024, 1, 31))


def test_filter_and_sum_three_record_fixture(make_record):
    records = [
        make_record(100, "2024-01-05"),
        make_record(50, "2024-01-20"),
        make_record(75, "2024-02-01"),
    ]

    in_january = aggregation.filter_by_interval(records, JANUARY_2024)

    assert aggregation.total_amount(in_january) == Decimal("150")


def test_filter_is_idempotent(make_record):
    records = [
        make_record(1, "2023-12-31"),
        make_record(2, "2024-01-01"),
        make_record(3, "2024-01-31"),
        make_record(4, None),
    ]

    once = aggregation.filter_by_interval(records, JANUARY_2024)
    twice = aggregation.filter_by_interval(once, JANUARY_2024)

    assert once == twice
    assert [r.amount for r in once] == [Decimal("2"), Decimal("3")]


def test_filter_excludes_undated_records(make_record):
    undated = make_record(10, None)
    assert aggregation.filter_by_interval([undated], JANUARY_2024) == []


def test_sum_of_nothing_is_zero():
    assert aggregation.total_amount([]) == Decimal("0")


def test_statistics_empty():
    stats = aggregation.statistics([])
    assert stats == Statistics(count=0, total=Decimal("0"), average=Decimal("0"),
                               min=Decimal("0"), max=Decimal("0"))


def test_statistics_values(make_record):
    records = [make_record("10.00"), make_record("-4.50"), make_record("30.50")]

    stats = aggregation.statistics(records)

    assert stats.count == 3
    assert stats.total == Decimal("36.00")
    assert stats.average == Decimal("12")
    assert stats.min == Decimal("-4.50")
    assert stats.max == Decimal("30.50")


def test_statistics_accepts_generator(make_record):
    stats = aggregation.statistics(make_record(n) for n in (1, 2, 3))
    assert stats.count == 3
    assert stats.total == Decimal("6")


def test_sort_by_date_ascending_and_descending(make_record):
    a = make_record(1, "2024-01-10", id="a")
    b = make_record(2, "2024-01-02", id="b")
    c = make_record(3, "2024-01-20", id="c")
    records = [a, b, c]

    assert [r.id for r in aggregation.sort_by_date(records, "asc")] == ["b", "a", "c"]
    assert [r.id for r in aggregation.sort_by_date(records, SortOrder.DESC)] == ["c", "a", "b"]
    assert records == [a, b, c]


def test_sort_by_date_is_stable_and_puts_undated_last(make_record):
    first = make_record(1, "2024-01-05", id="first")
    second = make_record(2, "2024-01-05", id="second")
    undated = make_record(3, None, id="undated")

    asc = aggregation.sort_by_date([undated, first, second], "asc")
    desc = aggregation.sort_by_date([undated, first, second], "desc")

    assert [r.id for r in asc] == ["first", "second", "undated"]
    assert [r.id for r in desc] == ["first", "second", "undated"]


def test_sort_by_amount_is_numeric(make_record):
    records = [make_record("9"), make_record("100"), make_record("25.5")]

    assert [r.amount for r in aggregation.sort_by_amount(records, "asc")] == [
        Decimal("9"), Decimal("25.5"), Decimal("100"),
    ]
    assert [r.amount for r in aggregation.sort_by_amount(records)] == [
        Decimal("100"), Decimal("25.5"), Decimal("9"),
    ]


def test_group_by_category_is_disjoint_cover(make_record):
    records = [
        make_record(10, "2024-01-01", category="Utilities", id="1"),
        make_record(20, "2024-01-02", category=None, id="2"),
        make_record(30, "2024-01-03", category="Utilities", id="3"),
        make_record(40, "2024-01-04", category="Pool", id="4"),
    ]

    groups = aggregation.group_by_category(records)

    assert list(groups) == ["Utilities", "Uncategorized", "Pool"]
    members = [r.id for bucket in groups.values() for r in bucket.members]
    assert sorted(members) == ["1", "2", "3", "4"]
    assert groups["Utilities"].subtotal == Decimal("40")
    assert groups["Utilities"].count == 2
    assert groups["Uncategorized"].count == 1


def test_group_by_single_uncategorized_record(make_record):
    record = make_record(5, "2024-01-01")
    groups = aggregation.group_by_category([record])
    assert list(groups) == ["Uncategorized"]
    assert groups["Uncategorized"].members == (record,)


def test_group_by_vendor_and_client_fallbacks(make_record):
    expense = make_record(5, "2024-01-01")
    invoice = make_record(5, "2024-01-01", kind=RecordKind.INVOICE)

    assert list(aggregation.group_by_vendor([expense])) == ["Unknown Vendor"]
    assert list(aggregation.group_by_client([invoice])) == ["Unknown"]


def test_group_by_custom_key(make_record):
    records = [make_record(1, note="a"), make_record(2, note="b"), make_record(3, note="a")]

    groups = aggregation.group_by(records, lambda r: r.note, "none")

    assert {key: bucket.subtotal for key, bucket in groups.items()} == {
        "a": Decimal("4"),
        "b": Decimal("2"),
    }


def test_group_by_month(make_record):
    records = [
        make_record(10, "2024-02-03"),
        make_record(20, "2024-01-15"),
        make_record(30, "2024-02-28"),
        make_record(40, None),
    ]

    groups = aggregation.group_by_month(records)

    assert list(groups) == ["2024-02", "2024-01", "unknown"]
    assert groups["2024-02"].label == "February 2024"
    assert groups["2024-02"].subtotal == Decimal("40")
    assert groups["unknown"].label == "Unknown Date"
    assert sorted(groups) == ["2024-01", "2024-02", "unknown"]


def test_unpaid_invoices_balance_threshold(make_record):
    zero = make_record(100, "2020-01-01", kind=RecordKind.INVOICE, balance="0", id="zero")
    cent = make_record(100, "2020-01-01", kind=RecordKind.INVOICE, balance="0.01", id="cent")
    none = make_record(100, "2020-01-01", kind=RecordKind.INVOICE, id="none")
    credit = make_record(100, "2020-01-01", kind=RecordKind.INVOICE, balance="-5", id="credit")

    unpaid = aggregation.unpaid_invoices([zero, cent, none, credit])

    assert [r.id for r in unpaid] == ["cent"]


def test_count_defaulted(make_record):
    records = [make_record(0, amount_defaulted=True), make_record(5)]
    assert aggregation.count_defaulted(records) == 1
