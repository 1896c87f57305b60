from datetime import datetime, time

import pytest

from AutoPark.api.config import OvernightWindow, Settings
from AutoPark.api.DBConnection import DBConnection
from AutoPark.api.DataAccess.AccessParkingLots import AccessParkingLots
from AutoPark.api.DataAccess.AccessParkingRates import AccessParkingRates
from AutoPark.api.DataAccess.AccessUsers import AccessUsers
from AutoPark.api.DataAccess.AccessVehicles import AccessVehicles
from AutoPark.api.Models.ParkingLot import ParkingLot
from AutoPark.api.Models.ParkingLotCoordinates import ParkingLotCoordinates
from AutoPark.api.Models.ParkingRate import ParkingRate
from AutoPark.api.Models.User import User
from AutoPark.api.Models.Vehicle import Vehicle


@pytest.fixture(autouse=True)
def no_aes_key(monkeypatch):
    monkeypatch.delenv("AUTOPARK_AES_KEY", raising=False)


@pytest.fixture()
def conn(tmp_path):
    connection = DBConnection(str(tmp_path / "test.db"))
    yield connection
    connection.close_connection()


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        data_dir=str(tmp_path),
        overnight=OvernightWindow(start=time(20, 0), end=time(8, 0)),
        qr_secret="unit-secret",
    )


@pytest.fixture()
def make_user(conn):
    counter = {"n": 0}

    def _make(role="DRIVER"):
        counter["n"] += 1
        user = User(
            id=None,
            username=f"user{counter['n']}",
            name=f"User {counter['n']}",
            email=f"user{counter['n']}@example.com",
            password="hash",
            created_at=datetime(2026, 1, 1, 9, 0, 0),
            phone="0612345678",
            role=role,
            active=True,
        )
        assert AccessUsers(conn=conn).add_user(user=user) is True
        return user

    return _make


@pytest.fixture()
def make_lot(conn):
    def _make(total_spots=10, name="Unit Lot"):
        lot = ParkingLot(
            id=None,
            name=name,
            address="Wijnhaven 107",
            city="Rotterdam",
            coordinates=ParkingLotCoordinates(lat=51.917, lng=4.484),
            total_spots=total_spots,
            available_spots=total_spots,
            created_at=datetime(2026, 1, 1, 9, 0, 0),
        )
        assert AccessParkingLots(conn=conn).add_parking_lot(parkinglot=lot) is True
        return lot

    return _make


@pytest.fixture()
def make_rate(conn):
    def _make(lot, rate_type="NORMAL", **prices):
        rate = ParkingRate(id=None, parking_lot_id=lot.id, rate_type=rate_type, **prices)
        AccessParkingRates(conn=conn).add_rate(rate)
        return rate

    return _make


@pytest.fixture()
def make_vehicle(conn):
    counter = {"n": 0}

    def _make(user, rate_type="NORMAL"):
        counter["n"] += 1
        vehicle = Vehicle(
            id=None,
            user=user,
            licenseplate=f"ab-{counter['n']:03d}-cd",
            vehicle_type="car",
            brand="Volkswagen",
            model="Golf",
            color="blue",
            created_at=datetime(2026, 1, 1, 9, 0, 0),
            rate_type=rate_type,
        )
        assert AccessVehicles(conn=conn).add_vehicle(vehicle=vehicle) is True
        return vehicle

    return _make
