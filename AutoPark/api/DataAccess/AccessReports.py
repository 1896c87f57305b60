from datetime import datetime
from typing import Any, Dict, Optional, Tuple
from AutoPark.api.DBConnection import DBConnection, DATETIME_FORMAT
from AutoPark.api.Models.ParkingRate import RATE_TYPES
from AutoPark.api.Models.Session import STATUS_CHECKED_OUT


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """Return [first day of month, first day of next month)."""
    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")
    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return start, end


class AccessReports:
    def __init__(self, conn: DBConnection):
        self.cursor = conn.cursor
        self.conn = conn.connection

    def get_monthly_report(self, year: int, month: int, lot_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Aggregate the checked-out sessions of one month

        Args:
            year: Report year
            month: Report month (1-12)
            lot_id: Restrict the report to one parking lot (default: all lots)

        Returns:
            Dict with number of parkings, revenue, distinct owners/vehicles,
            average charge and revenue per rate type
        """
        start, end = month_bounds(year, month)
        params = [
            STATUS_CHECKED_OUT,
            start.strftime(DATETIME_FORMAT),
            end.strftime(DATETIME_FORMAT),
            lot_id,
            lot_id,
        ]
        totals_query = """
        SELECT
            COUNT(*) AS total_parkings,
            COALESCE(SUM(cost), 0) AS total_revenue,
            COUNT(DISTINCT user_id) AS unique_users,
            COUNT(DISTINCT vehicle_id) AS unique_vehicles,
            COALESCE(SUM(duration_minutes), 0) AS total_minutes
        FROM sessions
        WHERE status = ?
            AND stopped >= ?
            AND stopped < ?
            AND (? IS NULL OR parking_lot_id = ?)
        """
        self.cursor.execute(totals_query, params)
        totals = dict(self.cursor.fetchone())

        by_rate_query = """
        SELECT rate_type, COUNT(*) AS parkings, COALESCE(SUM(cost), 0) AS revenue
        FROM sessions
        WHERE status = ?
            AND stopped >= ?
            AND stopped < ?
            AND (? IS NULL OR parking_lot_id = ?)
        GROUP BY rate_type
        """
        self.cursor.execute(by_rate_query, params)
        by_rate = {row["rate_type"]: row for row in self.cursor.fetchall()}

        total_parkings = totals["total_parkings"]
        total_revenue = round(float(totals["total_revenue"]), 2)

        return {
            "year": year,
            "month": month,
            "parking_lot_id": lot_id,
            "total_parkings": total_parkings,
            "total_revenue": total_revenue,
            "unique_users": totals["unique_users"],
            "unique_vehicles": totals["unique_vehicles"],
            "total_hours": round(totals["total_minutes"] / 60, 2),
            "average_charge": round(total_revenue / total_parkings, 2) if total_parkings else 0.0,
            "revenue_by_rate_type": {
                rate_type: round(float(by_rate[rate_type]["revenue"]), 2) if rate_type in by_rate else 0.0
                for rate_type in RATE_TYPES
            },
            "parkings_by_rate_type": {
                rate_type: by_rate[rate_type]["parkings"] if rate_type in by_rate else 0
                for rate_type in RATE_TYPES
            },
        }
