from datetime import datetime, timedelta

import pytest

from AutoPark.api.DataAccess.AccessReports import AccessReports, month_bounds
from AutoPark.api.session_service import ParkingService


def test_month_bounds():
    assert month_bounds(2026, 3) == (datetime(2026, 3, 1), datetime(2026, 4, 1))
    assert month_bounds(2026, 12) == (datetime(2026, 12, 1), datetime(2027, 1, 1))
    with pytest.raises(ValueError):
        month_bounds(2026, 13)


def test_monthly_report(conn, settings, make_user, make_lot, make_rate, make_vehicle):
    service = ParkingService(conn=conn, settings=settings)
    lot, other_lot = make_lot(name="A"), make_lot(name="B")
    for l in (lot, other_lot):
        make_rate(l, "NORMAL", price_per_hour=2.0)
        make_rate(l, "VIP", price_per_hour=2.0, vip_multiplier=2.0)

    alice, bob = make_user(), make_user()
    car = make_vehicle(alice)
    vip_car = make_vehicle(bob, rate_type="VIP")
    march = datetime(2026, 3, 10, 10, 0)

    s1 = service.check_in(car.id, lot.id, entered_at=march)
    service.check_out(s1.id, exited_at=march + timedelta(hours=2))
    s2 = service.check_in(vip_car.id, lot.id, entered_at=march)
    service.check_out(s2.id, exited_at=march + timedelta(hours=1))
    s3 = service.check_in(car.id, other_lot.id, entered_at=march + timedelta(days=1))
    service.check_out(s3.id, exited_at=march + timedelta(days=1, hours=1))
    # nog geparkeerd: telt niet mee
    service.check_in(car.id, lot.id, entered_at=march + timedelta(days=2))

    report = AccessReports(conn=conn).get_monthly_report(2026, 3)
    assert report["total_parkings"] == 3
    assert report["total_revenue"] == 10.0
    assert report["unique_users"] == 2
    assert report["unique_vehicles"] == 2
    assert report["average_charge"] == round(10.0 / 3, 2)
    assert report["revenue_by_rate_type"]["NORMAL"] == 6.0
    assert report["revenue_by_rate_type"]["VIP"] == 4.0
    assert report["revenue_by_rate_type"]["OVERNIGHT"] == 0.0

    per_lot = AccessReports(conn=conn).get_monthly_report(2026, 3, lot_id=other_lot.id)
    assert per_lot["total_parkings"] == 1
    assert per_lot["total_revenue"] == 2.0

    empty = AccessReports(conn=conn).get_monthly_report(2026, 4)
    assert empty["total_parkings"] == 0
    assert empty["average_charge"] == 0.0
