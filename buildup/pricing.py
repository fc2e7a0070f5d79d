from enum import Enum

from buildup.errors import InvalidPlan

CURRENCY = "INR"


class Plan(str, Enum):
    STANDARD = "STANDARD"
    ULTIMATE = "ULTIMATE"
    PROFESSIONAL = "PROFESSIONAL"


# whole rupees
PLAN_PRICES = {
    Plan.STANDARD: 2499,
    Plan.ULTIMATE: 3749,
    Plan.PROFESSIONAL: 4999,
}


def price_for(plan) -> tuple[Plan, int]:
    try:
        resolved = Plan(plan)
    except ValueError:
        raise InvalidPlan() from None
    return resolved, PLAN_PRICES[resolved]


def to_paise(amount: int) -> int:
    return amount * 100
