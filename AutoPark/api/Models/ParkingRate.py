from datetime import datetime

RATE_NORMAL = "NORMAL"
RATE_VIP = "VIP"
RATE_HOURLY = "HOURLY"
RATE_OVERNIGHT = "OVERNIGHT"

RATE_TYPES = (RATE_NORMAL, RATE_VIP, RATE_HOURLY, RATE_OVERNIGHT)


class ParkingRate:

    def __init__(self,
                 id: int,
                 parking_lot_id: int,
                 rate_type: str,
                 price_per_hour: float = 0.0,
                 price_per_day: float = 0.0,
                 overnight_price: float = 0.0,
                 min_charge_amount: float = 0.0,
                 max_charge_per_day: float = 0.0,
                 vip_multiplier: float = 1.0,
                 is_active: bool = True,
                 created_at: datetime = None,
                 updated_at: datetime = None):

        self.id = id
        self.parking_lot_id = parking_lot_id
        self.rate_type = rate_type
        self.price_per_hour = price_per_hour
        self.price_per_day = price_per_day
        self.overnight_price = overnight_price
        self.min_charge_amount = min_charge_amount
        self.max_charge_per_day = max_charge_per_day
        self.vip_multiplier = vip_multiplier
        self.is_active = is_active
        self.created_at = created_at or datetime.now().replace(microsecond=0)
        self.updated_at = updated_at or self.created_at


    @property
    def is_vip(self) -> bool:
        return self.rate_type == RATE_VIP


    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "parking_lot_id": self.parking_lot_id,
            "rate_type": self.rate_type,
            "price_per_hour": self.price_per_hour,
            "price_per_day": self.price_per_day,
            "overnight_price": self.overnight_price,
            "min_charge_amount": self.min_charge_amount,
            "max_charge_per_day": self.max_charge_per_day,
            "vip_multiplier": self.vip_multiplier,
            "is_active": self.is_active,
            "created_at": self.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            "updated_at": self.updated_at.strftime("%Y-%m-%d %H:%M:%S"),
        }


    def __repr__(self):
        return f"ParkingRate({self.id}, lot={self.parking_lot_id}, {self.rate_type})"
