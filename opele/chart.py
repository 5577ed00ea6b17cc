"""
Opele Chain Visualization
Two legs of four seeds each; open seeds light, closed seeds dark
"""

import plotly.graph_objects as go
from typing import Dict, List, Sequence

from .data.models import LegMark, SignDescriptor

SEED_COLORS = {
    LegMark.OPEN: '#ffdd9e',
    LegMark.CLOSED: '#5a3e1b',
}
CHAIN_COLOR = '#cbb486'


def _leg_trace(marks: Sequence[LegMark], x: float, name: str) -> go.Scatter:
    # First bit at the top of the chain
    y = list(range(len(marks), 0, -1))
    return go.Scatter(
        x=[x] * len(marks),
        y=y,
        mode='lines+markers',
        name=name,
        line=dict(color=CHAIN_COLOR, width=3),
        marker=dict(
            size=38,
            color=[SEED_COLORS[mark] for mark in marks],
            line=dict(color=CHAIN_COLOR, width=2),
        ),
        customdata=[mark.value for mark in marks],
        hovertemplate=f'<b>{name}</b><br>%{{customdata}}<extra></extra>',
    )


def build_chain_figure(descriptor: SignDescriptor) -> go.Figure:
    """
    Render the chain for a sign.

    The right leg is drawn on the viewer's left, as the diviner sees it
    when facing the tray.
    """
    fig = go.Figure()
    fig.add_trace(_leg_trace(descriptor.right_leg, 0.0, 'Right leg'))
    fig.add_trace(_leg_trace(descriptor.left_leg, 1.0, 'Left leg'))

    fig.update_layout(
        title=dict(text=f'{descriptor.name} ({descriptor.binary_signature})', x=0.5),
        height=420,
        margin=dict(l=20, r=20, t=60, b=20),
        plot_bgcolor='#1c130a',
        paper_bgcolor='#1c130a',
        font=dict(color=CHAIN_COLOR),
        showlegend=False
    )
    fig.update_xaxes(visible=False, range=[-0.75, 1.75])
    fig.update_yaxes(visible=False, range=[0.25, 4.75])
    return fig


def build_source_chart(daily_metrics: Dict) -> go.Figure:
    """Bar chart of today's casts by entropy source."""
    casts = daily_metrics.get('casts', {})
    labels: List[str] = ['physical', 'fallback']
    counts = [int(casts.get(label, 0)) for label in labels]

    fig = go.Figure(data=[
        go.Bar(
            x=['Physical', 'Fallback'],
            y=counts,
            marker_color=[SEED_COLORS[LegMark.OPEN], SEED_COLORS[LegMark.CLOSED]],
            hovertemplate='<b>%{x}</b><br>Casts: %{y}<extra></extra>'
        )
    ])
    fig.update_layout(
        title=None,
        height=260,
        margin=dict(l=40, r=20, t=20, b=40),
        plot_bgcolor='white',
        showlegend=False
    )
    fig.update_yaxes(title_text='Casts', rangemode='tozero')
    return fig
