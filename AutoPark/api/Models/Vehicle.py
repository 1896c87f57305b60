from datetime import datetime
from .User import User
from .ParkingRate import RATE_NORMAL

class Vehicle:

    def __init__(self,
                  id: int,
                  user: User,
                  licenseplate: str,
                  vehicle_type: str,
                  brand: str,
                  model: str,
                  color: str,
                  created_at: datetime,
                  rate_type: str = RATE_NORMAL):

        self.id = id
        self.user = user
        self.licenseplate = licenseplate
        self.vehicle_type = vehicle_type
        self.brand = brand
        self.model = model
        self.color = color
        self.created_at = created_at
        self.rate_type = rate_type


    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user.id if self.user is not None else None,
            "licenseplate": self.licenseplate,
            "vehicle_type": self.vehicle_type,
            "brand": self.brand,
            "model": self.model,
            "color": self.color,
            "rate_type": self.rate_type,
            "created_at": self.created_at.strftime("%Y-%m-%d %H:%M:%S"),
        }


    def __repr__(self):
        return self.licenseplate
