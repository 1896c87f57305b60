import sqlite3
import logging
from datetime import datetime
from AutoPark.api.DBConnection import DBConnection, DATETIME_FORMAT
from AutoPark.api.DataAccess.AccessUsers import AccessUsers
from AutoPark.api.Models.Vehicle import Vehicle
from AutoPark.api.Models.User import User

logger = logging.getLogger(__name__)


def normalize_licenseplate(licenseplate: str) -> str:
    return licenseplate.strip().replace(" ", "").upper()


class AccessVehicles:

    def __init__(self, conn: DBConnection):
        self.cursor = conn.cursor
        self.conn = conn.connection
        self.accessusers = AccessUsers(conn=conn)


    def _to_vehicle(self, row):
        vehicle_dict = dict(row)
        vehicle_dict["created_at"] = datetime.strptime(vehicle_dict["created_at"], DATETIME_FORMAT)
        vehicle_dict["user"] = self.accessusers.get_user_byid(id=vehicle_dict.pop("user_id"))
        return Vehicle(**vehicle_dict)


    def _payload(self, vehicle: Vehicle):
        return {
            "id": vehicle.id,
            "user_id": vehicle.user.id,
            "licenseplate": normalize_licenseplate(vehicle.licenseplate),
            "vehicle_type": vehicle.vehicle_type,
            "brand": vehicle.brand,
            "model": vehicle.model,
            "color": vehicle.color,
            "rate_type": vehicle.rate_type,
            "created_at": vehicle.created_at.strftime(DATETIME_FORMAT),
        }


    def get_vehicle(self, id):
        query = """
        SELECT * FROM vehicles
        WHERE id = ?;
        """
        self.cursor.execute(query, [id])
        vehicle = self.cursor.fetchone()
        if vehicle is None:
            return None
        return self._to_vehicle(vehicle)


    def get_vehicle_bylicenseplate(self, licenseplate: str):
        query = """
        SELECT * FROM vehicles
        WHERE licenseplate = ?;
        """
        self.cursor.execute(query, [normalize_licenseplate(licenseplate)])
        vehicle = self.cursor.fetchone()
        if vehicle is None:
            return None
        return self._to_vehicle(vehicle)


    def get_vehicles_byuser(self, user: User):
        query = """
        SELECT * FROM vehicles
        WHERE user_id = ?
        ORDER BY id;
        """
        self.cursor.execute(query, [user.id])
        rows = self.cursor.fetchall()
        return [self._to_vehicle(row) for row in rows]


    def add_vehicle(self, vehicle: Vehicle) -> bool:
        query = """
        INSERT INTO vehicles
            (user_id, licenseplate, vehicle_type, brand, model, color, rate_type, created_at)
        VALUES
            (:user_id, :licenseplate, :vehicle_type, :brand, :model, :color, :rate_type, :created_at)
        RETURNING id;
        """
        vehicle.licenseplate = normalize_licenseplate(vehicle.licenseplate)
        try:
            self.cursor.execute(query, self._payload(vehicle))
            vehicle.id = self.cursor.fetchone()[0]
            self.conn.commit()
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            logger.warning("Could not add vehicle %s: %s", vehicle.licenseplate, e)
            return False
        return True


    def update_vehicle(self, vehicle: Vehicle) -> bool:
        query = """
        UPDATE vehicles
        SET licenseplate = :licenseplate,
            vehicle_type = :vehicle_type,
            brand = :brand,
            model = :model,
            color = :color,
            rate_type = :rate_type
        WHERE id = :id;
        """
        vehicle.licenseplate = normalize_licenseplate(vehicle.licenseplate)
        try:
            self.cursor.execute(query, self._payload(vehicle))
            self.conn.commit()
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            logger.warning("Could not update vehicle %s: %s", vehicle.id, e)
            return False
        return True


    def delete_vehicle(self, vehicle: Vehicle) -> bool:
        query = """
        DELETE FROM vehicles
        WHERE id = ?;
        """
        try:
            self.cursor.execute(query, [vehicle.id])
            self.conn.commit()
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            logger.warning("Could not delete vehicle %s: %s", vehicle.id, e)
            return False
        return True
