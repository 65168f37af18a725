"""Personal-finance calculators.

Rates are annual percentages (``5`` means 5%). Monthly compounding divides
the annual rate by 12. Every helper returns a dict of Decimals quantized to
cents, so the view can hand it straight to the response.
"""
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
TENTH = Decimal("0.1")
HUNDRED = Decimal("100")
TWELVE = Decimal("12")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _annuity_factor(rate: Decimal, periods: Decimal) -> Decimal:
    """Future value of 1 paid at the end of each of ``periods`` periods."""
    if rate == 0:
        return periods
    return ((1 + rate) ** periods - 1) / rate


def _amortized_payment(principal: Decimal, rate: Decimal, periods: Decimal) -> Decimal:
    if rate == 0:
        return principal / periods
    growth = (1 + rate) ** periods
    return principal * (rate * growth) / (growth - 1)


def savings(monthly_savings: Decimal, years: Decimal, annual_rate: Decimal) -> dict:
    periods = years * TWELVE
    rate = annual_rate / HUNDRED / TWELVE
    future_value = monthly_savings * _annuity_factor(rate, periods)
    contributions = monthly_savings * periods
    return {
        "future_value": _money(future_value),
        "total_contributions": _money(contributions),
        "interest_earned": _money(future_value - contributions),
        "monthly_savings": _money(monthly_savings),
    }


def loan(principal: Decimal, years: Decimal, annual_rate: Decimal) -> dict:
    periods = years * TWELVE
    rate = annual_rate / HUNDRED / TWELVE
    payment = _amortized_payment(principal, rate, periods)
    total = payment * periods
    return {
        "monthly_payment": _money(payment),
        "total_payment": _money(total),
        "total_interest": _money(total - principal),
    }


def tax(annual_income: Decimal, tax_rate: Decimal, deductions: Decimal = Decimal("0")) -> dict:
    taxable = max(annual_income - deductions, Decimal("0"))
    amount = taxable * tax_rate / HUNDRED
    return {
        "taxable_income": _money(taxable),
        "tax_amount": _money(amount),
        "net_income": _money(annual_income - amount),
    }


def investment(initial: Decimal, monthly_contribution: Decimal, years: Decimal,
               annual_return: Decimal) -> dict:
    periods = years * TWELVE
    rate = annual_return / HUNDRED / TWELVE
    future_value = initial * (1 + rate) ** periods + monthly_contribution * _annuity_factor(rate, periods)
    contributions = initial + monthly_contribution * periods
    return {
        "future_value": _money(future_value),
        "total_contributions": _money(contributions),
        "total_returns": _money(future_value - contributions),
    }


def retirement(current_age: int, retirement_age: int, initial: Decimal,
               monthly_contribution: Decimal, annual_return: Decimal) -> dict:
    # Contributions are rolled up yearly, so growth compounds once a year
    if retirement_age <= current_age:
        raise ValueError("retirement_age must be greater than current_age")
    years = Decimal(retirement_age - current_age)
    rate = annual_return / HUNDRED
    yearly = monthly_contribution * TWELVE
    future_value = initial * (1 + rate) ** years + yearly * _annuity_factor(rate, years)
    contributions = initial + yearly * years
    return {
        "estimated_savings": _money(future_value),
        "total_contributions": _money(contributions),
        "investment_returns": _money(future_value - contributions),
        "years_to_retirement": int(years),
        "monthly_contribution": _money(monthly_contribution),
    }


def mortgage(home_price: Decimal, down_payment: Decimal, years: Decimal,
             annual_rate: Decimal) -> dict:
    if down_payment >= home_price:
        raise ValueError("down_payment must be less than home_price")
    principal = home_price - down_payment
    result = loan(principal, years, annual_rate)
    ltv = (principal / home_price * HUNDRED).quantize(TENTH, rounding=ROUND_HALF_UP)
    return {"loan_amount": _money(principal), **result, "loan_to_value": ltv}


CALCULATORS = {
    "savings": savings,
    "loan": loan,
    "tax": tax,
    "investment": investment,
    "retirement": retirement,
    "mortgage": mortgage,
}
