from __future__ import annotations

from datetime import datetime

from sheet_rollup.models.record import Record
from sheet_rollup.services.revenue import (
    FIXED,
    OTHER,
    REVENUE_TYPES,
    TIME_AND_EXPENSE,
    ActivitySeqClassifier,
    ChainedClassifier,
    KeywordRevenueClassifier,
    classify,
    revenue_by_type,
    tag_revenue_type,
)


def test_keyword_classifier():
    clf = KeywordRevenueClassifier()
    assert clf(Record.of(activityDescription="T&E travel")) == TIME_AND_EXPENSE
    assert clf(Record.of(activityDescription="Hourly consulting")) == TIME_AND_EXPENSE
    assert clf(Record.of(activityDescription="Milestone payment")) == FIXED
    assert clf(Record.of(activityDescription="Internal review")) is None
    assert clf(Record.of()) is None


def test_activity_seq_classifier():
    clf = ActivitySeqClassifier()
    assert clf(Record.of(activitySeq="100100")) == TIME_AND_EXPENSE
    assert clf(Record.of(activitySeq=199999.0)) == TIME_AND_EXPENSE
    assert clf(Record.of(activitySeq="200000")) == FIXED
    assert clf(Record.of(activitySeq="300100")) is None
    assert clf(Record.of(activitySeq="n/a")) is None


def test_sequence_range_wins_over_keywords_by_default():
    # Keyword says Fixed, sequence says T&E
    record = Record.of(activitySeq="100100", activityDescription="Fixed price delivery")
    assert classify(record) == TIME_AND_EXPENSE
    keyword_first = ChainedClassifier(KeywordRevenueClassifier(), ActivitySeqClassifier())
    assert classify(record, keyword_first) == FIXED


def test_fallbacks():
    assert classify(Record.of(activitySeq="900", activityDescription="fixed fee")) == FIXED
    assert classify(Record.of(activitySeq="900", activityDescription="misc")) == OTHER


def test_tag_revenue_type_keeps_originals():
    records = [Record.of(activitySeq="100100"), Record.of(activitySeq="250000")]
    tagged = tag_revenue_type(records)
    assert [r.get("revenueType") for r in tagged] == [TIME_AND_EXPENSE, FIXED]
    assert all("revenueType" not in r for r in records)


def test_revenue_by_type_series():
    records = [
        Record.of(date=datetime(2024, 1, 5), activitySeq="100100", revenue=100.0, cost=50.0, hours=2.0),
        Record.of(date=datetime(2024, 1, 9), activitySeq="200100", revenue=300.0, cost=90.0, hours=1.0),
        Record.of(date=datetime(2024, 2, 1), activitySeq="100200", revenue=40.0, cost=10.0, hours=1.0),
    ]
    series = revenue_by_type(records, "month")
    assert set(series) == set(REVENUE_TYPES)
    assert [(b.period, b.total("revenue")) for b in series[TIME_AND_EXPENSE]] == [("2024-01", 100.0), ("2024-02", 40.0)]
    assert [(b.period, b.total("revenue")) for b in series[FIXED]] == [("2024-01", 300.0)]
    assert series[OTHER] == []
