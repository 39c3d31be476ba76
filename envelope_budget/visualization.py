"""Plotly visualisation helpers for the envelope budget.

Each function accepts a DataFrame produced by :mod:`balances` and returns
a `plotly.graph_objects.Figure` that Streamlit can render via
``st.plotly_chart``.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import plotly.graph_objects as go

POSITIVE_COLOUR = '#2e7d32'
NEGATIVE_COLOUR = '#c62828'
REMAINING_COLOUR = '#90a4ae'


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def create_envelope_balance_chart(summary: pd.DataFrame, currency: str, title: str | None = None) -> go.Figure:
    """Grouped bar chart of balance and remaining-this-month per envelope.

    Parameters
    ----------
    summary : pandas.DataFrame
        Output of :func:`balances.envelope_summary`.
    currency : str
        Currency code used in the axis title.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Bars for the cumulative balance, coloured red when negative, next
        to bars for the amount remaining this month.
    """
    if summary is None or summary.empty:
        return _empty_figure()

    balance_colours = np.where(summary['Balance'] < 0, NEGATIVE_COLOUR, POSITIVE_COLOUR)
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=summary['Envelope'],
        y=summary['Balance'],
        name='Balance',
        marker_color=balance_colours.tolist(),
    ))
    fig.add_trace(go.Bar(
        x=summary['Envelope'],
        y=summary['Remaining'],
        name='Remaining this month',
        marker_color=REMAINING_COLOUR,
    ))
    fig.update_layout(
        title=title or "Envelope balances",
        barmode='group',
        xaxis_title="Envelope",
        yaxis_title=f"Amount ({currency})",
        legend=dict(orientation='h', yanchor='bottom', y=1.02, xanchor='right', x=1),
    )
    return fig
