import sqlite3
from datetime import datetime
from AutoPark.api.DBConnection import DBConnection, DATETIME_FORMAT
from AutoPark.api.Models.Session import Session, STATUS_CHECKED_IN, STATUS_CHECKED_OUT
from AutoPark.api.Models.User import User
from AutoPark.api.DataAccess.AccessUsers import AccessUsers
from AutoPark.api.DataAccess.AccessParkingLots import AccessParkingLots
from AutoPark.api.DataAccess.AccessVehicles import AccessVehicles
from AutoPark.api.exceptions import VehicleAlreadyParked

class AccessSessions:

    def __init__(self, conn: DBConnection):
        self.cursor = conn.cursor
        self.conn = conn.connection
        self.accessusers = AccessUsers(conn=conn)
        self.accessparkinglots = AccessParkingLots(conn=conn)
        self.accessvehicles = AccessVehicles(conn=conn)


    def _to_session(self, row):
        session_dict = dict(row)
        session_dict["started"] = datetime.strptime(session_dict["started"], DATETIME_FORMAT)
        if session_dict.get("stopped") is not None:
            session_dict["stopped"] = datetime.strptime(session_dict["stopped"], DATETIME_FORMAT)
        session_dict["cost"] = float(session_dict.get("cost") or 0.0)
        session_dict["user"] = self.accessusers.get_user_byid(id=session_dict.pop("user_id"))
        session_dict["vehicle"] = self.accessvehicles.get_vehicle(id=session_dict.pop("vehicle_id"))
        session_dict["parking_lot"] = self.accessparkinglots.get_parking_lot(id=session_dict.pop("parking_lot_id"))
        return Session(**session_dict)


    def _fetch_sessions(self, query, params):
        self.cursor.execute(query, params)
        rows = self.cursor.fetchall()
        return [self._to_session(row) for row in rows]


    def get_session(self, id):
        query = """
        SELECT * FROM sessions
        WHERE id = ?;
        """
        self.cursor.execute(query, [id])
        session = self.cursor.fetchone()
        if session is None:
            return None
        return self._to_session(session)


    def get_active_session_byvehicle(self, vehicle_id):
        query = """
        SELECT * FROM sessions
        WHERE vehicle_id = ?
        AND status = ?;
        """
        self.cursor.execute(query, [vehicle_id, STATUS_CHECKED_IN])
        session = self.cursor.fetchone()
        if session is None:
            return None
        return self._to_session(session)


    def get_sessions_byuser(self, user: User):
        query = """
        SELECT * FROM sessions
        WHERE user_id = ?
        ORDER BY started DESC, id DESC;
        """
        return self._fetch_sessions(query, [user.id])


    def get_all_sessions(self):
        query = """
        SELECT * FROM sessions
        ORDER BY started DESC, id DESC;
        """
        return self._fetch_sessions(query, [])


    def get_sessions_stopped_between(self, start: datetime, end: datetime, user: User = None):
        query = """
        SELECT * FROM sessions
        WHERE status = ?
        AND stopped >= ?
        AND stopped < ?
        AND (? IS NULL OR user_id = ?)
        ORDER BY stopped, id;
        """
        user_id = user.id if user is not None else None
        return self._fetch_sessions(query, [
            STATUS_CHECKED_OUT,
            start.strftime(DATETIME_FORMAT),
            end.strftime(DATETIME_FORMAT),
            user_id,
            user_id,
        ])


    def add_session(self, session: Session):
        query = """
        INSERT INTO sessions
            (parking_lot_id, vehicle_id, user_id, licenseplate, rate_type, rate_id, started, stopped,
             duration_minutes, cost, status, payment_status)
        VALUES
            (:parking_lot_id, :vehicle_id, :user_id, :licenseplate, :rate_type, :rate_id, :started, NULL,
             0, 0, :status, :payment_status)
        RETURNING id;
        """
        payload = {
            "parking_lot_id": session.parking_lot.id,
            "vehicle_id": session.vehicle.id,
            "user_id": session.user.id,
            "licenseplate": session.licenseplate,
            "rate_type": session.rate_type,
            "rate_id": session.rate_id,
            "started": session.started.strftime(DATETIME_FORMAT),
            "status": session.status,
            "payment_status": session.payment_status,
        }
        try:
            self.cursor.execute(query, payload)
            session.id = self.cursor.fetchone()[0]
            self.conn.commit()
        except sqlite3.IntegrityError:
            # unieke index: maximaal een actieve sessie per voertuig
            self.conn.rollback()
            raise VehicleAlreadyParked(f"Vehicle {session.licenseplate} is already checked in")


    def close_session(self, session: Session) -> bool:
        """Move a checked-in session to CHECKED_OUT. Returns False when the
        session was already closed by someone else."""
        query = """
        UPDATE sessions
        SET stopped = :stopped,
            duration_minutes = :duration_minutes,
            cost = :cost,
            status = :closed
        WHERE id = :id
        AND status = :open;
        """
        self.cursor.execute(query, {
            "id": session.id,
            "stopped": session.stopped.strftime(DATETIME_FORMAT),
            "duration_minutes": session.duration_minutes,
            "cost": session.cost,
            "closed": STATUS_CHECKED_OUT,
            "open": STATUS_CHECKED_IN,
        })
        closed = self.cursor.rowcount == 1
        if closed:
            session.status = STATUS_CHECKED_OUT
        return closed


    def update_payment_status(self, session: Session):
        query = """
        UPDATE sessions
        SET payment_status = ?
        WHERE id = ?;
        """
        self.cursor.execute(query, [session.payment_status, session.id])
        self.conn.commit()
