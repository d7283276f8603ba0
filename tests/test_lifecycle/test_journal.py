"""Tests for trade collection updates."""

from trademind.lifecycle.journal import add_trade, delete_trade, find_trade, replace_trade
from trademind.lifecycle.results import IssueCode


def test_add_prepends(make_trade):
    existing = [make_trade(id="a")]
    result = add_trade(existing, make_trade(id="b"))
    assert result.ok
    assert [t.id for t in result.trades] == ["b", "a"]
    assert [t.id for t in existing] == ["a"]


def test_add_duplicate_rejected(make_trade):
    result = add_trade([make_trade(id="a")], make_trade(id="a"))
    assert result.issues[0].code == IssueCode.INVALID
    assert len(result.trades) == 1


def test_find_trade(make_trade):
    trades = [make_trade(id="a"), make_trade(id="b")]
    assert find_trade(trades, "b").id == "b"
    assert find_trade(trades, "zz") is None


def test_replace_trade(make_trade):
    trades = [make_trade(id="a"), make_trade(id="b")]
    result = replace_trade(trades, make_trade(id="b", notes="edited"))
    assert result.ok
    assert [t.notes for t in result.trades] == ["", "edited"]


def test_replace_missing(make_trade):
    result = replace_trade([make_trade(id="a")], make_trade(id="b"))
    assert result.issues[0].code == IssueCode.NOT_FOUND


class TestDelete:
    def test_requires_confirmation(self, make_trade):
        trades = [make_trade(id="a")]
        result = delete_trade(trades, "a")
        assert result.issues[0].code == IssueCode.CONFIRMATION_REQUIRED
        assert [t.id for t in result.trades] == ["a"]

    def test_confirmed_leaves_others_untouched(self, make_trade, make_closed_trade):
        trades = [make_trade(id="a"), make_closed_trade(3.0, pnl=50.0, id="b"), make_trade(id="c")]
        result = delete_trade(trades, "b", confirmed=True)
        assert result.ok
        assert result.trades == [trades[0], trades[2]]

    def test_not_found(self, make_trade):
        result = delete_trade([make_trade(id="a")], "zz", confirmed=True)
        assert result.issues[0].code == IssueCode.NOT_FOUND
