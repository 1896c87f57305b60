import json
import logging
import os
import threading
from datetime import datetime

from pydantic import ValidationError

from AutoPark.api.DBConnection import DBConnection
from AutoPark.api.DataAccess.AccessParkingLots import AccessParkingLots
from AutoPark.api.DataAccess.AccessParkingRates import AccessParkingRates
from AutoPark.api.exceptions import RateConflict
from AutoPark.api.models import ImportParkingLot
from AutoPark.api.Models.ParkingLot import ParkingLot
from AutoPark.api.Models.ParkingLotCoordinates import ParkingLotCoordinates
from AutoPark.api.Models.ParkingRate import ParkingRate

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1

# Voorkomt dat twee requests tegelijk hetzelfde JSON-bestand schrijven
json_file_lock = threading.Lock()


def load_json(path):
    with json_file_lock:
        with open(path, "r", encoding="utf-8") as file:
            return json.load(file)


def write_json(path, data):
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with json_file_lock:
        with open(path, "w", encoding="utf-8") as file:
            json.dump(data, file, indent=4)


def export_data(conn: DBConnection) -> dict:
    """Lots with their rates, in the format `import_data` accepts."""
    accesslots = AccessParkingLots(conn=conn)
    accessrates = AccessParkingRates(conn=conn)

    parking_lots = []
    for lot in accesslots.get_all_parking_lots():
        lot_dict = lot.to_dict()
        lot_dict["rates"] = [rate.to_dict() for rate in accessrates.get_rates_byparkinglot(lot.id)]
        parking_lots.append(lot_dict)

    return {
        "version": EXPORT_VERSION,
        "exported_at": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "parking_lots": parking_lots,
    }


def export_to_file(document: dict, directory: str) -> str:
    path = os.path.join(directory, f"autopark-export-{datetime.now().strftime('%Y%m%d-%H%M%S')}.json")
    write_json(path, document)
    return path


def import_data(conn: DBConnection, document: dict) -> dict:
    """Create every lot in `document` as a new lot and attach its rates.

    Invalid lots and conflicting rates are skipped and reported.
    """
    accesslots = AccessParkingLots(conn=conn)
    accessrates = AccessParkingRates(conn=conn)
    result = {"parking_lots": 0, "rates": 0, "skipped": []}

    for index, raw in enumerate(document.get("parking_lots", [])):
        try:
            item = ImportParkingLot.model_validate(raw)
        except ValidationError as e:
            result["skipped"].append({"index": index, "error": f"invalid parking lot: {e.error_count()} errors"})
            continue

        now = datetime.now().replace(microsecond=0)
        lot = ParkingLot(
            id=None,
            name=item.name,
            address=item.address,
            city=item.city,
            coordinates=ParkingLotCoordinates(lat=item.coordinates.lat, lng=item.coordinates.lng),
            total_spots=item.total_spots,
            available_spots=item.total_spots,
            created_at=now,
            opening_time=item.opening_time,
            closing_time=item.closing_time,
            is_24_hours=item.is_24_hours,
            contact_number=item.contact_number,
            description=item.description,
        )
        if not accesslots.add_parking_lot(lot):
            result["skipped"].append({"index": index, "error": "parking lot could not be stored"})
            continue
        result["parking_lots"] += 1

        for rate_item in item.rates:
            rate = ParkingRate(id=None, parking_lot_id=lot.id, **rate_item.model_dump())
            try:
                accessrates.add_rate(rate)
            except RateConflict as e:
                result["skipped"].append({"index": index, "error": e.message})
                continue
            result["rates"] += 1

    logger.info("Imported %d parking lots and %d rates", result["parking_lots"], result["rates"])
    return result
