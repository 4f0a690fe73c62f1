from typing import Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402


def plot_profiles(
    df: pd.DataFrame,
    x: str = "TIME",
    y: str = "conc",
    group: str = "ID",
    path: Optional[str] = None,
    log_y: bool = False,
    title: Optional[str] = None,
):
    """Spaghetti plot: one line per ``group`` of ``y`` against ``x``."""
    data = df[df[y].notna()]
    fig, ax = plt.subplots(figsize=(8, 5))
    for key, sub in data.groupby(group, sort=True):
        sub = sub.sort_values(x)
        ax.plot(sub[x], sub[y], marker="o", markersize=3, linewidth=1, alpha=0.7, label=str(key))
    ax.set_xlabel(x)
    ax.set_ylabel(y)
    if log_y:
        ax.set_yscale("log")
    if title:
        ax.set_title(title)
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    if path is not None:
        fig.savefig(path, dpi=150)
        plt.close(fig)
    return fig
