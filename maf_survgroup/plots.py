from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from maf_survgroup.config import GroupEncoding
from maf_survgroup.survival import fit_group_km, km_median_time, label_groups, logrank_p


def init_style() -> None:
    sns.set_theme(style="whitegrid", context="paper")
    sns.set_palette("colorblind")


def savefig(fig: plt.Figure, path: Path, *, dpi: int = 200) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=dpi, bbox_inches="tight", facecolor="white")
    plt.close(fig)


def _group_palette() -> dict[str, str]:
    return {GroupEncoding.MUTANT: "maroon", GroupEncoding.WT: "royalblue"}


def km_plot_geneset(
    clinical: pd.DataFrame,
    mutant_samples: list[str],
    *,
    title: str,
    out_path: Path,
    show_risk_table: bool = True,
) -> None:
    """
    Kaplan-Meier curves for samples mutated in a gene set vs the rest (log-rank p in the title).
    Nothing is written when one of the groups is empty.
    """
    init_style()
    cd = label_groups(clinical, mutant_samples)
    if cd["Group"].nunique() != 2:
        return

    palette = _group_palette()
    fig, ax = plt.subplots(figsize=(6.0, 4.8))
    kmfs = fit_group_km(cd)
    for g, kmf in kmfs.items():
        sub = cd[cd["Group"] == g]
        med = km_median_time(sub["Time"], sub["Status"])
        med_s = f"{med:.0f}" if med is not None else "NA"
        kmf.plot_survival_function(
            ax=ax,
            ci_show=True,
            linewidth=2,
            color=palette[g],
            label=f"{g} (n={sub.shape[0]}, median={med_s})",
        )

    p = logrank_p(cd)
    ax.set_title(f"{title}\nlog-rank p={p:.2e}")
    ax.set_xlabel("Time")
    ax.set_ylabel("Survival probability")
    ax.legend(title=None, frameon=True, loc="best")

    if show_risk_table and kmfs:
        try:
            from lifelines.plotting import add_at_risk_counts

            add_at_risk_counts(*kmfs.values(), ax=ax)
        except Exception:
            pass
    savefig(fig, out_path)
