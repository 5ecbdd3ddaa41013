from __future__ import annotations
import matplotlib
# Use non-interactive backend suitable for servers
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import hashlib
import os
from typing import Optional

from ..schemas import CategorySeries, TimeSeries


def plot_encoding(chart, out_dir: str = "./charts") -> Optional[str]:
    """Render a series encoding to PNG. Single metrics and empty series have no image."""
    if not isinstance(chart, (CategorySeries, TimeSeries)) or not chart.data:
        return None
    os.makedirs(out_dir, exist_ok=True)
    digest = hashlib.md5(chart.model_dump_json().encode()).hexdigest()[:16]
    fpath = os.path.join(out_dir, f"chart_{chart.type}_{digest}.png")

    labels = [p.label for p in chart.data]
    values = [p.value for p in chart.data]
    fig = plt.figure()
    try:
        if chart.type == "line":
            plt.plot(labels, values, marker="o")
        else:
            plt.bar(labels, values)
        plt.xticks(rotation=45, ha="right")
        plt.tight_layout(); plt.savefig(fpath)
    finally:
        plt.close(fig)
    return fpath
