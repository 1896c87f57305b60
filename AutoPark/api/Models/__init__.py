from .User import User
from .ParkingLot import ParkingLot
from .ParkingLotCoordinates import ParkingLotCoordinates
from .ParkingRate import ParkingRate
from .Vehicle import Vehicle
from .Session import Session
from .Invoice import Invoice
from .OverdueCharge import OverdueCharge
from .QRCodeData import QRCodeData
