# shipment_tracker/ui/charts.py

import pandas as pd
import plotly.express as px


def build_status_timeline(history: pd.DataFrame):
    """
    Scatter timeline of status changes per shipment.

    Expects the frame produced by TrackerView.history_frame().
    Returns None when there is nothing to plot.
    """
    if history.empty:
        return None

    df = history.copy()
    df["time"] = pd.to_datetime(df["timestamp"], unit="ms", utc=True)

    fig = px.scatter(
        df,
        x="time",
        y="shipment_id",
        color="new_status",
        hover_data=["description"],
        title="📈 Status Timeline",
    )
    fig.update_traces(marker=dict(size=12))
    fig.update_layout(yaxis_title="Shipment", xaxis_title="Time (UTC)")
    return fig
