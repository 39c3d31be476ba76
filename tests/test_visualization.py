import pandas as pd

from envelope_budget.balances import envelope_summary
from envelope_budget.visualization import (
    NEGATIVE_COLOUR,
    POSITIVE_COLOUR,
    create_envelope_balance_chart,
)

from conftest import expense


def test_balance_chart_has_balance_and_remaining_bars(budget_store) -> None:
    budget_store.transactions.append(expense('t1', '2024-03-05', 500.0, 'fun'))
    fig = create_envelope_balance_chart(envelope_summary(budget_store), 'AUD')

    assert [trace.name for trace in fig.data] == ['Balance', 'Remaining this month']
    assert list(fig.data[0].x) == ['Groceries', 'Rent', 'Fun']
    assert list(fig.data[0].marker.color) == [POSITIVE_COLOUR, POSITIVE_COLOUR, NEGATIVE_COLOUR]
    assert fig.layout.yaxis.title.text == 'Amount (AUD)'


def test_balance_chart_empty() -> None:
    fig = create_envelope_balance_chart(pd.DataFrame(), 'AUD')
    assert len(fig.data) == 0
    assert fig.layout.title.text == 'No data to display'
