import sqlite3
from datetime import datetime
from AutoPark.api.DBConnection import DBConnection, DATETIME_FORMAT
from AutoPark.api.Models.ParkingRate import ParkingRate
from AutoPark.api.exceptions import RateConflict


class AccessParkingRates:

    def __init__(self, conn: DBConnection):
        self.cursor = conn.cursor
        self.conn = conn.connection


    def _to_rate(self, row):
        rate_dict = dict(row)
        rate_dict["is_active"] = bool(rate_dict["is_active"])
        for key in ("price_per_hour", "price_per_day", "overnight_price",
                    "min_charge_amount", "max_charge_per_day", "vip_multiplier"):
            rate_dict[key] = float(rate_dict[key])
        rate_dict["created_at"] = datetime.strptime(rate_dict["created_at"], DATETIME_FORMAT)
        rate_dict["updated_at"] = datetime.strptime(rate_dict["updated_at"], DATETIME_FORMAT)
        return ParkingRate(**rate_dict)


    def _payload(self, rate: ParkingRate):
        payload = dict(rate.__dict__)
        payload["created_at"] = rate.created_at.strftime(DATETIME_FORMAT)
        payload["updated_at"] = rate.updated_at.strftime(DATETIME_FORMAT)
        return payload


    def get_rate(self, id):
        query = """
        SELECT * FROM parking_rates
        WHERE id = ?;
        """
        self.cursor.execute(query, [id])
        result = self.cursor.fetchone()
        if result is None:
            return None
        return self._to_rate(result)


    def get_rates_byparkinglot(self, parking_lot_id, active_only: bool = False):
        query = """
        SELECT * FROM parking_rates
        WHERE parking_lot_id = ?
        AND (is_active = 1 OR ? = 0)
        ORDER BY rate_type, id;
        """
        self.cursor.execute(query, [parking_lot_id, 1 if active_only else 0])
        return [self._to_rate(row) for row in self.cursor.fetchall()]


    def get_active_rate(self, parking_lot_id, rate_type: str):
        query = """
        SELECT * FROM parking_rates
        WHERE parking_lot_id = ?
        AND rate_type = ?
        AND is_active = 1;
        """
        self.cursor.execute(query, [parking_lot_id, rate_type])
        result = self.cursor.fetchone()
        if result is None:
            return None
        return self._to_rate(result)


    def add_rate(self, rate: ParkingRate):
        query = """
        INSERT INTO parking_rates
            (parking_lot_id, rate_type, price_per_hour, price_per_day, overnight_price,
             min_charge_amount, max_charge_per_day, vip_multiplier, is_active, created_at, updated_at)
        VALUES
            (:parking_lot_id, :rate_type, :price_per_hour, :price_per_day, :overnight_price,
             :min_charge_amount, :max_charge_per_day, :vip_multiplier, :is_active, :created_at, :updated_at)
        RETURNING id;
        """
        try:
            self.cursor.execute(query, self._payload(rate))
            rate.id = self.cursor.fetchone()[0]
            self.conn.commit()
        except sqlite3.IntegrityError:
            self.conn.rollback()
            raise RateConflict(f"Parking lot {rate.parking_lot_id} already has an active {rate.rate_type} rate")


    def update_rate(self, rate: ParkingRate):
        query = """
        UPDATE parking_rates
        SET price_per_hour = :price_per_hour,
            price_per_day = :price_per_day,
            overnight_price = :overnight_price,
            min_charge_amount = :min_charge_amount,
            max_charge_per_day = :max_charge_per_day,
            vip_multiplier = :vip_multiplier,
            is_active = :is_active,
            updated_at = :updated_at
        WHERE id = :id;
        """
        rate.updated_at = datetime.now().replace(microsecond=0)
        try:
            self.cursor.execute(query, self._payload(rate))
            self.conn.commit()
        except sqlite3.IntegrityError:
            self.conn.rollback()
            raise RateConflict(f"Parking lot {rate.parking_lot_id} already has an active {rate.rate_type} rate")


    def delete_rate(self, rate: ParkingRate) -> bool:
        """Returns False when sessions still refer to the rate; deactivate it instead."""
        query = """
        DELETE FROM parking_rates
        WHERE id = ?;
        """
        try:
            self.cursor.execute(query, [rate.id])
            self.conn.commit()
        except sqlite3.IntegrityError:
            self.conn.rollback()
            return False
        return True
