from .reward_calculator import (
    RewardCalculator,
    RewardTotals,
    apply_first_month,
    bonus_amount,
    calculate_reward_totals,
    default_applicable_date,
    get_reward_calculator,
    salary_month_total,
)

__all__ = [
    "RewardCalculator",
    "RewardTotals",
    "apply_first_month",
    "bonus_amount",
    "calculate_reward_totals",
    "default_applicable_date",
    "get_reward_calculator",
    "salary_month_total",
]
