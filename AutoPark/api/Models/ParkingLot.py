from datetime import datetime
from .ParkingLotCoordinates import ParkingLotCoordinates

class ParkingLot:

    def __init__(self,
                 id: int,
                 name: str,
                 address: str,
                 city: str,
                 coordinates: ParkingLotCoordinates,
                 total_spots: int,
                 available_spots: int,
                 created_at: datetime,
                 opening_time: str = "",
                 closing_time: str = "",
                 is_24_hours: bool = False,
                 contact_number: str = "",
                 description: str = ""):

        self.id = id
        self.name = name
        self.address = address
        self.city = city
        self.coordinates = coordinates
        self.total_spots = total_spots
        self.available_spots = available_spots
        self.created_at = created_at
        self.opening_time = opening_time
        self.closing_time = closing_time
        self.is_24_hours = is_24_hours
        self.contact_number = contact_number
        self.description = description


    @property
    def occupied_spots(self) -> int:
        return self.total_spots - self.available_spots


    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "city": self.city,
            "coordinates": {"lat": self.coordinates.lat, "lng": self.coordinates.lng},
            "total_spots": self.total_spots,
            "available_spots": self.available_spots,
            "opening_time": self.opening_time,
            "closing_time": self.closing_time,
            "is_24_hours": self.is_24_hours,
            "contact_number": self.contact_number,
            "description": self.description,
            "created_at": self.created_at.strftime("%Y-%m-%d %H:%M:%S"),
        }


    def __repr__(self):
        return f"ParkingLot({self.id}, {self.name!r}, {self.available_spots}/{self.total_spots})"
