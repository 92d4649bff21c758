from __future__ import annotations

import numpy as np
from scipy import stats


def signif(x: float, digits: int = 3) -> float:
    """Round to `digits` significant digits (R's signif)."""
    x = float(x)
    if not np.isfinite(x) or x == 0.0:
        return x
    return float(f"{x:.{digits}g}")


def chisq_p(statistic: float, dof: int) -> float:
    return float(stats.chi2.sf(float(statistic), dof))
