import itertools

from xiaohonghua.core.balance import compute_balance, contribution, totals_by_kind
from xiaohonghua.models.transaction import TransactionType


def test_example_ledger_balance(sample_transactions):
    assert compute_balance(sample_transactions) == 100 - 30 - 10


def test_empty_ledger_balance_is_zero():
    assert compute_balance([]) == 0


def test_balance_ignores_order(sample_transactions):
    results = {compute_balance(p) for p in itertools.permutations(sample_transactions)}
    assert results == {60}


def test_balance_can_go_negative(sample_transactions):
    earning, spending, penalty = sample_transactions
    assert compute_balance([spending, penalty]) == -40


def test_contribution_sign(sample_transactions):
    assert [contribution(t) for t in sample_transactions] == [100, -30, -10]


def test_totals_by_kind_lists_every_type(sample_transactions):
    totals = totals_by_kind(sample_transactions[:1])
    assert totals == {
        TransactionType.EARNING: 100,
        TransactionType.SPENDING: 0,
        TransactionType.PENALTY: 0,
    }
