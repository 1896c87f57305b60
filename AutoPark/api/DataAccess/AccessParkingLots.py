import sqlite3
import logging
from datetime import datetime
from AutoPark.api.DBConnection import DBConnection, DATETIME_FORMAT
from AutoPark.api.Models.ParkingLot import ParkingLot
from AutoPark.api.Models.ParkingLotCoordinates import ParkingLotCoordinates

logger = logging.getLogger(__name__)


class AccessParkingLots:

    def __init__(self, conn: DBConnection):
        self.cursor = conn.cursor
        self.conn = conn.connection


    def _to_parking_lot(self, row):
        row_dict = dict(row)
        coordinates = ParkingLotCoordinates(
            id=row_dict["id"],
            lat=float(row_dict.pop("lat") or 0.0),
            lng=float(row_dict.pop("lng") or 0.0),
        )
        row_dict["coordinates"] = coordinates
        row_dict["is_24_hours"] = bool(row_dict["is_24_hours"])
        row_dict["created_at"] = datetime.strptime(row_dict["created_at"], DATETIME_FORMAT)
        return ParkingLot(**row_dict)


    def _payload(self, parkinglot: ParkingLot):
        return {
            "id": parkinglot.id,
            "name": parkinglot.name,
            "address": parkinglot.address,
            "city": parkinglot.city,
            "total_spots": parkinglot.total_spots,
            "available_spots": parkinglot.available_spots,
            "opening_time": parkinglot.opening_time,
            "closing_time": parkinglot.closing_time,
            "is_24_hours": parkinglot.is_24_hours,
            "contact_number": parkinglot.contact_number,
            "description": parkinglot.description,
            "created_at": parkinglot.created_at.strftime(DATETIME_FORMAT),
        }


    def get_all_parking_lots(self):
        query = """
        SELECT p.*, c.lat, c.lng
        FROM parking_lots p
        LEFT JOIN parking_lots_coordinates c ON c.id = p.id
        ORDER BY p.id;
        """
        self.cursor.execute(query)
        return [self._to_parking_lot(row) for row in self.cursor.fetchall()]


    def get_parking_lot(self, id):
        query = """
        SELECT p.*, c.lat, c.lng
        FROM parking_lots p
        LEFT JOIN parking_lots_coordinates c ON c.id = p.id
        WHERE p.id = ?;
        """
        self.cursor.execute(query, [id])
        result = self.cursor.fetchone()
        if result is None:
            return None
        return self._to_parking_lot(result)


    def add_parking_lot(self, parkinglot: ParkingLot) -> bool:
        query = """
        INSERT INTO parking_lots
            (name, address, city, total_spots, available_spots, opening_time, closing_time,
             is_24_hours, contact_number, description, created_at)
        VALUES
            (:name, :address, :city, :total_spots, :available_spots, :opening_time, :closing_time,
             :is_24_hours, :contact_number, :description, :created_at)
        RETURNING id;
        """
        coordinates_query = """
        INSERT INTO parking_lots_coordinates
            (id, lat, lng)
        VALUES
            (:id, :lat, :lng);
        """
        try:
            self.cursor.execute(query, self._payload(parkinglot))
            parkinglot.id = self.cursor.fetchone()[0]
            parkinglot.coordinates.id = parkinglot.id
            self.cursor.execute(coordinates_query, parkinglot.coordinates.__dict__)
            self.conn.commit()
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            logger.warning("Could not add parking lot %s: %s", parkinglot.name, e)
            return False
        return True


    def update_parking_lot(self, parkinglot: ParkingLot) -> bool:
        """Update the lot's details. Spot counters are only changed when the
        new capacity still covers the spots currently in use."""
        query = """
        UPDATE parking_lots
        SET name = :name,
            address = :address,
            city = :city,
            available_spots = :total_spots - (total_spots - available_spots),
            total_spots = :total_spots,
            opening_time = :opening_time,
            closing_time = :closing_time,
            is_24_hours = :is_24_hours,
            contact_number = :contact_number,
            description = :description
        WHERE id = :id
        AND :total_spots >= total_spots - available_spots;
        """
        coordinates_query = """
        UPDATE parking_lots_coordinates
        SET lat = :lat,
            lng = :lng
        WHERE id = :id;
        """
        self.cursor.execute(query, self._payload(parkinglot))
        if self.cursor.rowcount != 1:
            self.conn.rollback()
            return False
        parkinglot.coordinates.id = parkinglot.id
        self.cursor.execute(coordinates_query, parkinglot.coordinates.__dict__)
        self.conn.commit()
        return True


    def delete_parking_lot(self, parkinglot: ParkingLot) -> bool:
        query = """
        DELETE FROM parking_lots
        WHERE id = ?;
        """
        try:
            self.cursor.execute(query, [parkinglot.id])
            self.conn.commit()
        except sqlite3.IntegrityError as e:
            # lots with sessions blijven bestaan
            self.conn.rollback()
            logger.warning("Could not delete parking lot %s: %s", parkinglot.id, e)
            return False
        return True


    def take_spot(self, id) -> bool:
        query = """
        UPDATE parking_lots
        SET available_spots = available_spots - 1
        WHERE id = ?
        AND available_spots > 0;
        """
        self.cursor.execute(query, [id])
        changed = self.cursor.rowcount == 1
        self.conn.commit()
        return changed


    def release_spot(self, id) -> bool:
        query = """
        UPDATE parking_lots
        SET available_spots = available_spots + 1
        WHERE id = ?
        AND available_spots < total_spots;
        """
        self.cursor.execute(query, [id])
        changed = self.cursor.rowcount == 1
        self.conn.commit()
        return changed
