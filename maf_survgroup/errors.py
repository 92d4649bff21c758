from __future__ import annotations


class SurvGroupError(ValueError):
    pass


class InsufficientGenesError(SurvGroupError):
    def __init__(self, n_genes: int, *, where: str = "gene selection") -> None:
        self.n_genes = n_genes
        super().__init__(f"Minimum two genes required! Got {n_genes} at {where}.")


class MissingColumnError(SurvGroupError):
    def __init__(self, column: str, available: list[str], *, hint: str = "") -> None:
        self.column = column
        self.available = list(available)
        msg = f"{column} not found in clinical data. Available columns: {', '.join(map(str, self.available))}"
        if hint:
            msg = f"{msg}. {hint}"
        super().__init__(msg)


class CombinationFitFailure(SurvGroupError):
    """
    Survival fit failed for a single gene combination.
    Recoverable: the pipeline drops the combination and carries on.
    """

    def __init__(self, combination: str, reason: str) -> None:
        self.combination = combination
        self.reason = reason
        super().__init__(f"survival fit failed for {combination}: {reason}")
