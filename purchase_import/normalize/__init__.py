from .fields import add_months, looks_like_amount, normalize_amount, normalize_date, round_money

__all__ = [
    "add_months",
    "looks_like_amount",
    "normalize_amount",
    "normalize_date",
    "round_money",
]
