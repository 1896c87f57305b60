import math
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from AutoPark.api.config import OvernightWindow
from AutoPark.api.exceptions import InvalidDuration
from AutoPark.api.Models.ParkingRate import ParkingRate

CENT = Decimal("0.01")
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR


def _money(value) -> Decimal:
    # via str zodat 0.1 ook echt 0.1 wordt
    return Decimal(str(value or 0))


def round_currency(amount) -> float:
    return float(_money(amount).quantize(CENT, rounding=ROUND_HALF_UP))


def billable_hours(seconds: float) -> int:
    return math.ceil(seconds / SECONDS_PER_HOUR)


def duration_minutes(started: datetime, stopped: datetime) -> int:
    return int((stopped - started).total_seconds() // 60)


def window_occurrence(moment: datetime, window: OvernightWindow):
    """Return (opening, closing) of the overnight window that most recently
    opened at or before `moment`."""
    opening = datetime.combine(moment.date(), window.start)
    if opening > moment:
        opening -= timedelta(days=1)
    length = datetime.combine(date.min, window.end) - datetime.combine(date.min, window.start)
    if length <= timedelta(0):
        length += timedelta(days=1)
    return opening, opening + length


def is_overnight(started: datetime, stopped: datetime, window: OvernightWindow) -> bool:
    if window is None or not window.enabled:
        return False
    opening, closing = window_occurrence(started, window)
    return started < closing and stopped <= closing


def _day_block_charge(seconds: float, rate: ParkingRate) -> Decimal:
    charge = _money(rate.price_per_hour) * billable_hours(seconds)
    if rate.price_per_day > 0:
        charge = min(charge, _money(rate.price_per_day))
    if rate.max_charge_per_day > 0:
        charge = min(charge, _money(rate.max_charge_per_day))
    return charge


def calculate_charge(started: datetime, stopped: datetime, rate: ParkingRate,
                     window: OvernightWindow = None) -> float:
    """Charge for a parking interval under `rate`.

    A session that fits inside one occurrence of the overnight window pays the
    flat overnight price (when the rate has one). Otherwise every started
    24-hour block is billed per started hour and capped by the rate's day
    price and max charge per day. The minimum charge is applied as a floor and
    the VIP multiplier last.
    """
    if stopped < started:
        raise InvalidDuration(f"Exit {stopped} lies before entry {started}")

    if rate.overnight_price > 0 and is_overnight(started, stopped, window):
        amount = _money(rate.overnight_price)
    else:
        amount = Decimal("0")
        remaining = (stopped - started).total_seconds()
        while remaining > 0:
            block = min(remaining, SECONDS_PER_DAY)
            amount += _day_block_charge(block, rate)
            remaining -= block

    amount = max(amount, _money(rate.min_charge_amount))

    if rate.is_vip:
        amount *= _money(rate.vip_multiplier)

    return round_currency(amount)


def estimate_charge(hours: float, rate: ParkingRate) -> float:
    """Quote for a planned stay of `hours`; overnight pricing is not applied."""
    if hours < 0:
        raise InvalidDuration("Planned duration can not be negative")
    start = datetime(2000, 1, 1)
    return calculate_charge(start, start + timedelta(hours=hours), rate)


def calculate_overdue_charge(amount: float, days_overdue: int, late_fee_percentage: float) -> float:
    if days_overdue <= 0:
        return 0.0
    fee = _money(amount) * _money(late_fee_percentage) / Decimal(100) * days_overdue
    return round_currency(fee)
