import logging
import sqlite3
from datetime import datetime, timedelta

from AutoPark.api import qr_codes
from AutoPark.api.config import Settings, RESCAN_CHECKOUT
from AutoPark.api.crypto_utils import mask_value
from AutoPark.api.DBConnection import DBConnection
from AutoPark.api.DataAccess.AccessInvoices import AccessInvoices
from AutoPark.api.DataAccess.AccessParkingLots import AccessParkingLots
from AutoPark.api.DataAccess.AccessParkingRates import AccessParkingRates
from AutoPark.api.DataAccess.AccessSessions import AccessSessions
from AutoPark.api.DataAccess.AccessVehicles import AccessVehicles
from AutoPark.api.exceptions import (
    LotFull,
    LotNotFound,
    NoApplicableRate,
    SessionNotFound,
    VehicleAlreadyParked,
    VehicleNotFound,
)
from AutoPark.api.Models.Invoice import Invoice
from AutoPark.api.Models.ParkingRate import ParkingRate
from AutoPark.api.Models.QRCodeData import QR_ENTRY
from AutoPark.api.Models.Session import Session
from AutoPark.api.session_calculator import calculate_charge, duration_minutes

logger = logging.getLogger(__name__)

ACTION_CHECKED_IN = "CHECKED_IN"
ACTION_CHECKED_OUT = "CHECKED_OUT"


def invoice_number(session: Session, issued_at: datetime) -> str:
    return f"INV-{issued_at.strftime('%Y%m')}-{session.id:06d}"


class ParkingService:
    """Check-in/check-out workflow: a vehicle goes from not parked to
    CHECKED_IN to CHECKED_OUT, and check-out always leaves one invoice."""

    def __init__(self, conn: DBConnection, settings: Settings):
        self.conn = conn.connection
        self.settings = settings
        self.accessparkinglots = AccessParkingLots(conn=conn)
        self.accessrates = AccessParkingRates(conn=conn)
        self.accessvehicles = AccessVehicles(conn=conn)
        self.accesssessions = AccessSessions(conn=conn)
        self.accessinvoices = AccessInvoices(conn=conn)


    def resolve_rate(self, lot_id, rate_type: str) -> ParkingRate:
        if self.accessparkinglots.get_parking_lot(id=lot_id) is None:
            raise LotNotFound(f"Parking lot {lot_id} does not exist")
        rate = self.accessrates.get_active_rate(parking_lot_id=lot_id, rate_type=rate_type)
        if rate is None:
            raise NoApplicableRate(f"Parking lot {lot_id} has no active {rate_type} rate")
        return rate


    def check_in(self, vehicle_id, lot_id, rate_type: str = None, entered_at: datetime = None) -> Session:
        vehicle = self.accessvehicles.get_vehicle(id=vehicle_id)
        if vehicle is None:
            raise VehicleNotFound(f"Vehicle {vehicle_id} does not exist")
        if self.accesssessions.get_active_session_byvehicle(vehicle_id=vehicle.id) is not None:
            raise VehicleAlreadyParked(f"Vehicle {vehicle.licenseplate} is already checked in")

        lot = self.accessparkinglots.get_parking_lot(id=lot_id)
        if lot is None:
            raise LotNotFound(f"Parking lot {lot_id} does not exist")

        rate_type = rate_type or vehicle.rate_type
        rate = self.resolve_rate(lot.id, rate_type)

        if not self.accessparkinglots.take_spot(id=lot.id):
            raise LotFull(f"Parking lot {lot.name} is full")

        session = Session(
            id=None,
            parking_lot=lot,
            vehicle=vehicle,
            user=vehicle.user,
            licenseplate=vehicle.licenseplate,
            rate_type=rate_type,
            rate_id=rate.id,
            started=(entered_at or datetime.now()).replace(microsecond=0),
        )
        try:
            self.accesssessions.add_session(session)
        except (VehicleAlreadyParked, sqlite3.Error):
            # plek teruggeven, take_spot heeft al gecommit
            self.conn.rollback()
            self.accessparkinglots.release_spot(id=lot.id)
            raise

        session.parking_lot = self.accessparkinglots.get_parking_lot(id=lot.id)
        logger.info("Vehicle %s checked in at lot %s (session %s, %s rate)",
                    mask_value(vehicle.licenseplate, keep=2), lot.id, session.id, rate_type)
        return session


    def check_out(self, session_id, exited_at: datetime = None) -> Invoice:
        session = self.accesssessions.get_session(id=session_id)
        if session is None or not session.is_active:
            raise SessionNotFound(f"No active session with id {session_id}")

        exited_at = (exited_at or datetime.now()).replace(microsecond=0)
        # het tarief van de check-in, ook als het inmiddels gedeactiveerd is
        rate = self.accessrates.get_rate(id=session.rate_id)
        if rate is None:
            raise NoApplicableRate(f"Rate {session.rate_id} of session {session_id} no longer exists")
        cost = calculate_charge(session.started, exited_at, rate, self.settings.overnight)

        session.stopped = exited_at
        session.duration_minutes = duration_minutes(session.started, exited_at)
        session.cost = cost

        invoice = Invoice(
            id=None,
            invoice_number=invoice_number(session, exited_at),
            session=session,
            amount=cost,
            issued_at=exited_at,
            due_date=exited_at + timedelta(days=self.settings.invoice_due_days),
        )

        try:
            if not self.accesssessions.close_session(session):
                self.conn.rollback()
                raise SessionNotFound(f"Session {session_id} was already checked out")
            self.accessinvoices.add_invoice(invoice, commit=False)
            released = self.accessparkinglots.release_spot(id=session.parking_lot.id)
        except sqlite3.Error:
            self.conn.rollback()
            logger.exception("Check-out of session %s failed", session_id)
            raise

        if not released:
            logger.warning("Lot %s was already at full capacity on check-out of session %s",
                           session.parking_lot.id, session.id)
        session.parking_lot = self.accessparkinglots.get_parking_lot(id=session.parking_lot.id)
        logger.info("Vehicle %s checked out of lot %s (session %s, %.2f, invoice %s)",
                    mask_value(session.licenseplate, keep=2), session.parking_lot.id, session.id, cost,
                    invoice.invoice_number)
        return invoice


    def process_scan(self, text: str, lot_id, now: datetime = None) -> dict:
        """Handle a QR code scanned at the gate of `lot_id`."""
        now = now or datetime.now()
        data = qr_codes.parse_and_validate(
            text,
            secret=self.settings.qr_secret,
            expiry_seconds=self.settings.qr_expiry_seconds,
            now=now.timestamp(),
        )

        vehicle = self.accessvehicles.get_vehicle_bylicenseplate(data.licenseplate)
        if vehicle is None or vehicle.user.id != data.user_id:
            raise VehicleNotFound(f"Vehicle {data.licenseplate} is not registered to this user")

        active = self.accesssessions.get_active_session_byvehicle(vehicle_id=vehicle.id)

        if data.qr_type == QR_ENTRY and active is None:
            session = self.check_in(vehicle.id, lot_id, entered_at=now)
            return {"action": ACTION_CHECKED_IN, "session": session, "invoice": None}

        if data.qr_type == QR_ENTRY and self.settings.rescan_mode != RESCAN_CHECKOUT:
            raise VehicleAlreadyParked(f"Vehicle {vehicle.licenseplate} is already checked in")

        if active is None or str(active.parking_lot.id) != str(lot_id):
            raise SessionNotFound(f"Vehicle {vehicle.licenseplate} is not parked at lot {lot_id}")

        invoice = self.check_out(active.id, exited_at=now)
        return {"action": ACTION_CHECKED_OUT, "session": invoice.session, "invoice": invoice}
