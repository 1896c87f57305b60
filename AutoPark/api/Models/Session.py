from datetime import datetime
from AutoPark.api.Models.Vehicle import Vehicle
from AutoPark.api.Models.ParkingLot import ParkingLot
from AutoPark.api.Models.User import User

STATUS_CHECKED_IN = "CHECKED_IN"
STATUS_CHECKED_OUT = "CHECKED_OUT"

PAYMENT_PENDING = "PENDING"
PAYMENT_PAID = "PAID"


class Session:

    def __init__(self,
                 id: int,
                 parking_lot: ParkingLot,
                 vehicle: Vehicle,
                 user: User,
                 licenseplate: str,
                 rate_type: str,
                 started: datetime,
                 stopped: datetime = None,
                 duration_minutes: int = 0,
                 cost: float = 0.0,
                 status: str = STATUS_CHECKED_IN,
                 payment_status: str = PAYMENT_PENDING,
                 rate_id: int = None):

        self.id = id
        self.parking_lot = parking_lot
        self.vehicle = vehicle
        self.user = user
        self.licenseplate = licenseplate
        self.rate_type = rate_type
        self.started = started
        self.stopped = stopped
        self.duration_minutes = duration_minutes
        self.cost = cost
        self.status = status
        self.payment_status = payment_status
        self.rate_id = rate_id


    @property
    def is_active(self) -> bool:
        return self.status == STATUS_CHECKED_IN


    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "parking_lot_id": self.parking_lot.id,
            "vehicle_id": self.vehicle.id,
            "user_id": self.user.id,
            "licenseplate": self.licenseplate,
            "rate_type": self.rate_type,
            "rate_id": self.rate_id,
            "started": self.started.strftime("%Y-%m-%d %H:%M:%S"),
            "stopped": self.stopped.strftime("%Y-%m-%d %H:%M:%S") if self.stopped else None,
            "duration_minutes": self.duration_minutes,
            "cost": self.cost,
            "status": self.status,
            "payment_status": self.payment_status,
        }


    def __repr__(self):
        return f"Session({self.id}, {self.licenseplate}, {self.status})"
