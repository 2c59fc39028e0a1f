"""Risk-based position sizing: lose exactly risk_pct of balance if the stop is hit."""


def size_position(balance: float, risk_pct: float, entry_price: float, stop_loss: float) -> float:
    """
    quantity = (balance * risk_pct / 100) / |entry - stop|.
    Returns 0 for a zero stop distance or a non-positive budget.
    """
    distance = abs(entry_price - stop_loss)
    if distance == 0:
        return 0.0
    budget = balance * (risk_pct / 100.0)
    if budget <= 0:
        return 0.0
    return budget / distance
