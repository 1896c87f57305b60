from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import List, Optional

from AutoPark.api.Models.ParkingRate import RATE_TYPES, RATE_NORMAL
from AutoPark.api.Models.QRCodeData import QR_ENTRY, QR_EXIT
from AutoPark.api.Models.User import ROLE_ADMIN, ROLE_DRIVER

OPTIONAL_TIME = r"^(([01]\d|2[0-3]):[0-5]\d)?$"
# letters, cijfers, spaties en streepjes; "|" scheidt de velden van een QR code
LICENSEPLATE = r"^[A-Za-z0-9][A-Za-z0-9 -]*$"


def _rate_type(value: str) -> str:
    value = value.strip().upper()
    if value not in RATE_TYPES:
        raise ValueError(f"rate_type must be one of {', '.join(RATE_TYPES)}")
    return value


class UserRegister(BaseModel):
    username: str = Field(..., min_length=3, max_length=32, pattern=r"^[A-Za-z0-9_.-]{3,32}$")
    password: str = Field(..., min_length=8)
    name: str = Field(..., max_length=100)
    phone: str = ""
    email: EmailStr
    role: str = ROLE_DRIVER

    @field_validator("role")
    @classmethod
    def check_role(cls, value):
        value = value.upper()
        if value not in (ROLE_ADMIN, ROLE_DRIVER):
            raise ValueError("role must be ADMIN or DRIVER")
        return value


class UserLogin(BaseModel):
    username: str
    password: str


class UserProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    password: Optional[str] = Field(None, min_length=8)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class ParkingLotCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    address: str
    city: str
    coordinates: Coordinates
    total_spots: int = Field(..., ge=0)
    opening_time: str = Field("", pattern=OPTIONAL_TIME)
    closing_time: str = Field("", pattern=OPTIONAL_TIME)
    is_24_hours: bool = False
    contact_number: str = ""
    description: str = ""


class ParkingLotUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = None
    city: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    total_spots: Optional[int] = Field(None, ge=0)
    opening_time: Optional[str] = Field(None, pattern=OPTIONAL_TIME)
    closing_time: Optional[str] = Field(None, pattern=OPTIONAL_TIME)
    is_24_hours: Optional[bool] = None
    contact_number: Optional[str] = None
    description: Optional[str] = None


class RatePrices(BaseModel):
    price_per_hour: float = Field(0.0, ge=0)
    price_per_day: float = Field(0.0, ge=0)
    overnight_price: float = Field(0.0, ge=0)
    min_charge_amount: float = Field(0.0, ge=0)
    max_charge_per_day: float = Field(0.0, ge=0)
    vip_multiplier: float = Field(1.0, ge=1.0)
    is_active: bool = True

    @model_validator(mode="after")
    def check_bounds(self):
        if self.max_charge_per_day > 0:
            if self.min_charge_amount > self.max_charge_per_day:
                raise ValueError("min_charge_amount can not exceed max_charge_per_day")
            if self.overnight_price > self.max_charge_per_day:
                raise ValueError("overnight_price can not exceed max_charge_per_day")
        return self


class RateCreate(RatePrices):
    rate_type: str

    @field_validator("rate_type")
    @classmethod
    def check_rate_type(cls, value):
        return _rate_type(value)


class RateUpdate(BaseModel):
    price_per_hour: Optional[float] = Field(None, ge=0)
    price_per_day: Optional[float] = Field(None, ge=0)
    overnight_price: Optional[float] = Field(None, ge=0)
    min_charge_amount: Optional[float] = Field(None, ge=0)
    max_charge_per_day: Optional[float] = Field(None, ge=0)
    vip_multiplier: Optional[float] = Field(None, ge=1.0)
    is_active: Optional[bool] = None


class VehicleCreate(BaseModel):
    licenseplate: str = Field(..., min_length=1, max_length=20, pattern=LICENSEPLATE)
    vehicle_type: str = ""
    brand: str = ""
    model: str = ""
    color: str = ""
    rate_type: str = RATE_NORMAL

    @field_validator("rate_type")
    @classmethod
    def check_rate_type(cls, value):
        return _rate_type(value)


class VehicleUpdate(BaseModel):
    licenseplate: Optional[str] = Field(None, min_length=1, max_length=20, pattern=LICENSEPLATE)
    vehicle_type: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    rate_type: Optional[str] = None

    @field_validator("rate_type")
    @classmethod
    def check_rate_type(cls, value):
        return _rate_type(value) if value is not None else value


class QRRequest(BaseModel):
    vehicle_id: int
    qr_type: str = QR_ENTRY

    @field_validator("qr_type")
    @classmethod
    def check_qr_type(cls, value):
        value = value.upper()
        if value not in (QR_ENTRY, QR_EXIT):
            raise ValueError("qr_type must be ENTRY or EXIT")
        return value


class ScanRequest(BaseModel):
    qr_data: str = Field(..., min_length=1)
    parking_lot_id: int


class CheckInRequest(BaseModel):
    vehicle_id: int
    parking_lot_id: int
    rate_type: Optional[str] = None

    @field_validator("rate_type")
    @classmethod
    def check_rate_type(cls, value):
        return _rate_type(value) if value is not None else value


class PaymentRequest(BaseModel):
    amount: Optional[float] = Field(None, gt=0)


class ImportParkingLot(ParkingLotCreate):
    rates: List[RateCreate] = []


class DataImport(BaseModel):
    parking_lots: List[dict]
