# Standaard imports
import os
from datetime import datetime, timedelta
from typing import Optional

# 3rd party
import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Path, Query, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

# Locale imports
from . import authentication, qr_codes, session_manager, storage_utils
from .config import load_settings
from .DBConnection import DBConnection
from .DataAccess.AccessInvoices import AccessInvoices
from .DataAccess.AccessOverdueCharges import AccessOverdueCharges
from .DataAccess.AccessParkingLots import AccessParkingLots
from .DataAccess.AccessParkingRates import AccessParkingRates
from .DataAccess.AccessReports import AccessReports
from .DataAccess.AccessSessions import AccessSessions
from .DataAccess.AccessUsers import AccessUsers
from .DataAccess.AccessVehicles import AccessVehicles
from .DataAccess.Logger import Logger
from .exceptions import (
    InvalidQRCode,
    InvoiceNotFound,
    LotNotFound,
    ParkingError,
    SessionNotFound,
    VehicleNotFound,
)
from .invoice_service import InvoiceService
from .models import (
    CheckInRequest,
    DataImport,
    ParkingLotCreate,
    ParkingLotUpdate,
    PaymentRequest,
    QRRequest,
    RateCreate,
    RatePrices,
    RateUpdate,
    ScanRequest,
    UserLogin,
    UserProfileUpdate,
    UserRegister,
    VehicleCreate,
    VehicleUpdate,
)
from .Models.ParkingLot import ParkingLot
from .Models.ParkingLotCoordinates import ParkingLotCoordinates
from .Models.ParkingRate import ParkingRate, RATE_VIP
from .Models.User import User, ROLE_ADMIN
from .Models.Vehicle import Vehicle
from .session_calculator import estimate_charge
from .session_service import ParkingService
from AutoPark.middleware.performance_tracer import PerformanceTracer, setup_performance_log

get_current_user = authentication.get_current_user
require_roles = authentication.require_roles

settings = load_settings()

connection = DBConnection(database_path=settings.db_path)

access_users = AccessUsers(conn=connection)
access_vehicles = AccessVehicles(conn=connection)
access_parkinglots = AccessParkingLots(conn=connection)
access_rates = AccessParkingRates(conn=connection)
access_sessions = AccessSessions(conn=connection)
access_invoices = AccessInvoices(conn=connection)
access_overdue = AccessOverdueCharges(conn=connection)
access_reports = AccessReports(conn=connection)

parking_service = ParkingService(conn=connection, settings=settings)
invoice_service = InvoiceService(conn=connection, settings=settings)

logger = Logger(path=settings.log_path)
setup_performance_log(os.path.join(settings.data_dir, "perf.log"))

app = FastAPI(title="AutoPark API", version="1.0.0")

app.add_middleware(PerformanceTracer, alert_threshold_ms=settings.slow_request_ms)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

router = APIRouter(prefix="/api")


@app.exception_handler(ParkingError)
async def parking_error_handler(request: Request, exc: ParkingError):
    content = {"error": exc.code, "detail": exc.message}
    if isinstance(exc, InvalidQRCode):
        content["reason"] = exc.reason
    return JSONResponse(status_code=exc.status_code, content=content)


def _ensure_owner(user: User, owner: User, what: str):
    if user.role != ROLE_ADMIN and (owner is None or owner.id != user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Access denied to this {what}")


def _get_lot_or_404(lot_id: int) -> ParkingLot:
    lot = access_parkinglots.get_parking_lot(id=lot_id)
    if lot is None:
        raise LotNotFound(f"Parking lot {lot_id} does not exist")
    return lot


def _get_rate_or_404(rate_id: int) -> ParkingRate:
    rate = access_rates.get_rate(id=rate_id)
    if rate is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rate not found")
    return rate


def _get_vehicle_for(user: User, vehicle_id: int) -> Vehicle:
    vehicle = access_vehicles.get_vehicle(id=vehicle_id)
    if vehicle is None:
        raise VehicleNotFound(f"Vehicle {vehicle_id} does not exist")
    _ensure_owner(user, vehicle.user, "vehicle")
    return vehicle


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "AutoPark API is running"


# ---------- auth ----------

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: UserRegister, request: Request):
    if access_users.get_user_byusername(username=body.username) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")

    # alleen het eerste account mag zichzelf admin maken
    if body.role == ROLE_ADMIN and access_users.has_admin():
        token = authentication.extract_bearer_token(request.headers.get("Authorization"))
        caller = session_manager.get_session(token) if token else None
        if caller is None or caller.role != ROLE_ADMIN:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can create admins")

    new_user = User(
        id=None,
        username=body.username,
        name=body.name,
        email=body.email,
        password=authentication.hash_password(body.password),
        created_at=datetime.now().replace(microsecond=0),
        phone=body.phone,
        role=body.role,
        active=True,
    )
    if not access_users.add_user(user=new_user):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User could not be created")

    logger.log(user=new_user, endpoint="/register")
    return {"message": "User created", "id": new_user.id}


@router.post("/login")
async def login(body: UserLogin):
    user = access_users.get_user_byusername(username=body.username)
    if user is None or not authentication.verify_password(body.password, user.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")

    token = authentication.new_token()
    session_manager.add_session(token, user)
    logger.log(user=user, endpoint="/login")
    return {"message": "User logged in", "session_token": token}


@router.post("/logout")
async def logout(request: Request, user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/logout")
    token = authentication.extract_bearer_token(request.headers.get("Authorization"))
    session_manager.remove_session(token)
    return {"message": "User logged out successfully"}


@router.get("/profile")
async def get_profile(user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/profile")
    return user.to_dict()


@router.put("/profile")
async def update_profile(body: UserProfileUpdate, user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/profile")
    if body.name is not None:
        user.name = body.name
    if body.email is not None:
        user.email = body.email
    if body.phone is not None:
        user.phone = body.phone
    if body.password is not None:
        user.password = authentication.hash_password(body.password)
    access_users.update_user(user=user)
    session_manager.update_session_user(user)
    return {"message": "User updated successfully", "user": user.to_dict()}


# ---------- parking lots ----------

@router.get("/parkinglots")
async def list_parking_lots():
    return [lot.to_dict() for lot in access_parkinglots.get_all_parking_lots()]


@router.get("/parkinglots/{lot_id}")
async def get_parking_lot(lot_id: int):
    return _get_lot_or_404(lot_id).to_dict()


@router.post("/parkinglots", status_code=status.HTTP_201_CREATED)
async def create_parking_lot(body: ParkingLotCreate, user: User = Depends(require_roles(ROLE_ADMIN))):
    logger.log(user=user, endpoint="/parkinglots")
    lot = ParkingLot(
        id=None,
        name=body.name,
        address=body.address,
        city=body.city,
        coordinates=ParkingLotCoordinates(lat=body.coordinates.lat, lng=body.coordinates.lng),
        total_spots=body.total_spots,
        available_spots=body.total_spots,
        created_at=datetime.now().replace(microsecond=0),
        opening_time=body.opening_time,
        closing_time=body.closing_time,
        is_24_hours=body.is_24_hours,
        contact_number=body.contact_number,
        description=body.description,
    )
    if not access_parkinglots.add_parking_lot(parkinglot=lot):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Parking lot could not be created")
    return lot.to_dict()


@router.put("/parkinglots/{lot_id}")
async def update_parking_lot(lot_id: int, body: ParkingLotUpdate, user: User = Depends(require_roles(ROLE_ADMIN))):
    logger.log(user=user, endpoint="/parkinglots/{lot_id}")
    lot = _get_lot_or_404(lot_id)
    changes = body.model_dump(exclude_unset=True)
    coordinates = changes.pop("coordinates", None)
    for key, value in changes.items():
        if value is not None:
            setattr(lot, key, value)
    if coordinates is not None:
        lot.coordinates = ParkingLotCoordinates(id=lot.id, lat=coordinates["lat"], lng=coordinates["lng"])

    if not access_parkinglots.update_parking_lot(parkinglot=lot):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="total_spots can not be lower than the number of occupied spots",
        )
    return _get_lot_or_404(lot_id).to_dict()


@router.delete("/parkinglots/{lot_id}")
async def delete_parking_lot(lot_id: int, user: User = Depends(require_roles(ROLE_ADMIN))):
    logger.log(user=user, endpoint="/parkinglots/{lot_id}")
    lot = _get_lot_or_404(lot_id)
    if not access_parkinglots.delete_parking_lot(parkinglot=lot):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Parking lot has sessions and can not be deleted")
    return {"message": "Parking lot deleted"}


# ---------- rates ----------

@router.get("/parkinglots/{lot_id}/rates")
async def list_rates(lot_id: int, active_only: bool = False):
    _get_lot_or_404(lot_id)
    return [rate.to_dict() for rate in access_rates.get_rates_byparkinglot(lot_id, active_only=active_only)]


@router.get("/parkinglots/{lot_id}/rates/{rate_type}")
async def resolve_rate(lot_id: int, rate_type: str):
    return parking_service.resolve_rate(lot_id, rate_type.upper()).to_dict()


@router.get("/parkinglots/{lot_id}/rates/{rate_type}/estimate")
async def estimate_rate(lot_id: int, rate_type: str, hours: float = Query(..., ge=0, le=24 * 366)):
    rate = parking_service.resolve_rate(lot_id, rate_type.upper())
    return {
        "parking_lot_id": lot_id,
        "rate_type": rate.rate_type,
        "hours": hours,
        "estimated_charge": estimate_charge(hours, rate),
    }


@router.post("/parkinglots/{lot_id}/rates", status_code=status.HTTP_201_CREATED)
async def create_rate(lot_id: int, body: RateCreate, user: User = Depends(require_roles(ROLE_ADMIN))):
    logger.log(user=user, endpoint="/parkinglots/{lot_id}/rates")
    _get_lot_or_404(lot_id)
    rate = ParkingRate(id=None, parking_lot_id=lot_id, **body.model_dump())
    access_rates.add_rate(rate)
    return rate.to_dict()


@router.put("/rates/{rate_id}")
async def update_rate(rate_id: int, body: RateUpdate, user: User = Depends(require_roles(ROLE_ADMIN))):
    logger.log(user=user, endpoint="/rates/{rate_id}")
    rate = _get_rate_or_404(rate_id)
    merged = {key: getattr(rate, key) for key in RatePrices.model_fields}
    merged.update({k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None})
    try:
        prices = RatePrices.model_validate(merged)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    for key, value in prices.model_dump().items():
        setattr(rate, key, value)
    access_rates.update_rate(rate)
    return rate.to_dict()


@router.delete("/rates/{rate_id}")
async def delete_rate(rate_id: int, user: User = Depends(require_roles(ROLE_ADMIN))):
    logger.log(user=user, endpoint="/rates/{rate_id}")
    if not access_rates.delete_rate(_get_rate_or_404(rate_id)):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Rate is used by sessions, deactivate it instead")
    return {"message": "Rate deleted"}


# ---------- vehicles ----------

@router.get("/vehicles")
async def list_vehicles(user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/vehicles")
    return [vehicle.to_dict() for vehicle in access_vehicles.get_vehicles_byuser(user=user)]


@router.post("/vehicles", status_code=status.HTTP_201_CREATED)
async def create_vehicle(body: VehicleCreate, user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/vehicles")
    if body.rate_type == RATE_VIP and user.role != ROLE_ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can assign the VIP rate")

    vehicle = Vehicle(
        id=None,
        user=user,
        licenseplate=body.licenseplate,
        vehicle_type=body.vehicle_type,
        brand=body.brand,
        model=body.model,
        color=body.color,
        created_at=datetime.now().replace(microsecond=0),
        rate_type=body.rate_type,
    )
    if not access_vehicles.add_vehicle(vehicle=vehicle):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Vehicle already registered")
    return vehicle.to_dict()


@router.get("/vehicles/{vehicle_id}")
async def get_vehicle(vehicle_id: int, user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/vehicles/{vehicle_id}")
    return _get_vehicle_for(user, vehicle_id).to_dict()


@router.put("/vehicles/{vehicle_id}")
async def update_vehicle(vehicle_id: int, body: VehicleUpdate, user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/vehicles/{vehicle_id}")
    vehicle = _get_vehicle_for(user, vehicle_id)
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    if changes.get("rate_type") == RATE_VIP and user.role != ROLE_ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can assign the VIP rate")
    for key, value in changes.items():
        setattr(vehicle, key, value)
    if not access_vehicles.update_vehicle(vehicle=vehicle):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Vehicle already registered")
    return vehicle.to_dict()


@router.delete("/vehicles/{vehicle_id}")
async def delete_vehicle(vehicle_id: int, user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/vehicles/{vehicle_id}")
    vehicle = _get_vehicle_for(user, vehicle_id)
    if not access_vehicles.delete_vehicle(vehicle=vehicle):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Vehicle has sessions and can not be deleted")
    return {"message": "Vehicle deleted"}


# ---------- QR codes ----------

def _qr_for(user: User, body: QRRequest):
    vehicle = _get_vehicle_for(user, body.vehicle_id)
    return qr_codes.generate(vehicle.user, vehicle, body.qr_type, secret=settings.qr_secret)


@router.post("/qr", status_code=status.HTTP_201_CREATED)
async def create_qr_code(body: QRRequest, user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/qr")
    data = _qr_for(user, body)
    expires_at = datetime.fromtimestamp(data.timestamp) + timedelta(seconds=settings.qr_expiry_seconds)
    return {
        "qr_data": data.to_qr_string(),
        "qr_type": data.qr_type,
        "licenseplate": data.licenseplate,
        "expires_at": expires_at.strftime("%Y-%m-%d %H:%M:%S"),
    }


@router.post("/qr/image")
async def create_qr_image(body: QRRequest, user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/qr/image")
    data = _qr_for(user, body)
    return Response(content=qr_codes.render_png(data.to_qr_string()), media_type="image/png")


@router.post("/scan")
async def scan_qr_code(body: ScanRequest, user: User = Depends(require_roles(ROLE_ADMIN))):
    logger.log(user=user, endpoint="/scan")
    result = parking_service.process_scan(body.qr_data, body.parking_lot_id)
    invoice = result["invoice"]
    return {
        "action": result["action"],
        "session": result["session"].to_dict(),
        "invoice": invoice.to_dict() if invoice is not None else None,
    }


# ---------- sessions ----------

@router.post("/sessions/checkin", status_code=status.HTTP_201_CREATED)
async def check_in(body: CheckInRequest, user: User = Depends(require_roles(ROLE_ADMIN))):
    logger.log(user=user, endpoint="/sessions/checkin")
    session = parking_service.check_in(body.vehicle_id, body.parking_lot_id, rate_type=body.rate_type)
    return session.to_dict()


@router.post("/sessions/{session_id}/checkout")
async def check_out(session_id: int, user: User = Depends(require_roles(ROLE_ADMIN))):
    logger.log(user=user, endpoint="/sessions/{session_id}/checkout")
    invoice = parking_service.check_out(session_id)
    return invoice.to_dict()


@router.get("/sessions")
async def list_sessions(user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/sessions")
    if user.role == ROLE_ADMIN:
        sessions = access_sessions.get_all_sessions()
    else:
        sessions = access_sessions.get_sessions_byuser(user=user)
    return [session.to_dict() for session in sessions]


@router.get("/sessions/{session_id}")
async def get_session(session_id: int, user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/sessions/{session_id}")
    session = access_sessions.get_session(id=session_id)
    if session is None:
        raise SessionNotFound(f"Session {session_id} does not exist")
    _ensure_owner(user, session.user, "session")
    return session.to_dict()


# ---------- invoices ----------

@router.get("/invoices")
async def list_invoices(user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/invoices")
    if user.role == ROLE_ADMIN:
        invoices = access_invoices.get_all_invoices()
    else:
        invoices = access_invoices.get_invoices_byuser(user=user)
    return [invoice.to_dict() for invoice in invoices]


@router.get("/invoices/statement/{year}/{month}")
async def monthly_statement(
    year: int = Path(..., ge=2000, le=9999),
    month: int = Path(..., ge=1, le=12),
    user_id: Optional[int] = None,
    user: User = Depends(get_current_user),
):
    logger.log(user=user, endpoint="/invoices/statement/{year}/{month}")
    owner = user
    if user_id is not None and user_id != user.id:
        if user.role != ROLE_ADMIN:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
        owner = access_users.get_user_byid(id=user_id)
        if owner is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return invoice_service.monthly_statement(owner, year, month)


@router.get("/invoices/{invoice_id}")
async def get_invoice(invoice_id: int, user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/invoices/{invoice_id}")
    invoice = invoice_service.get_invoice(invoice_id)
    _ensure_owner(user, invoice.user, "invoice")
    result = invoice.to_dict()
    result["amount_due"] = invoice_service.amount_due(invoice)
    return result


@router.post("/invoices/{invoice_id}/pay")
async def pay_invoice(invoice_id: int, body: Optional[PaymentRequest] = None,
                      user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/invoices/{invoice_id}/pay")
    invoice = access_invoices.get_invoice(id=invoice_id)
    if invoice is None:
        raise InvoiceNotFound(f"Invoice {invoice_id} does not exist")
    _ensure_owner(user, invoice.user, "invoice")
    return invoice_service.pay_invoice(invoice_id, amount=body.amount if body is not None else None).to_dict()


# ---------- overdue charges ----------

@router.post("/overdue/process")
async def process_overdue(user: User = Depends(require_roles(ROLE_ADMIN))):
    logger.log(user=user, endpoint="/overdue/process")
    charges = invoice_service.process_overdue_invoices()
    return {"processed": len(charges), "charges": [charge.to_dict() for charge in charges]}


@router.get("/overdue")
async def list_overdue(user: User = Depends(get_current_user)):
    logger.log(user=user, endpoint="/overdue")
    if user.role == ROLE_ADMIN:
        charges = access_overdue.get_all_charges()
    else:
        charges = access_overdue.get_charges_byuser(user=user)
    return [charge.to_dict() for charge in charges]


# ---------- reports & data ----------

@router.get("/reports/{year}/{month}")
async def monthly_report(
    year: int = Path(..., ge=2000, le=9999),
    month: int = Path(..., ge=1, le=12),
    parking_lot_id: Optional[int] = None,
    user: User = Depends(require_roles(ROLE_ADMIN)),
):
    logger.log(user=user, endpoint="/reports/{year}/{month}")
    if parking_lot_id is not None:
        _get_lot_or_404(parking_lot_id)
    return access_reports.get_monthly_report(year, month, lot_id=parking_lot_id)


@router.get("/data/export")
async def export_data(save: bool = False, user: User = Depends(require_roles(ROLE_ADMIN))):
    logger.log(user=user, endpoint="/data/export")
    document = storage_utils.export_data(connection)
    if save:
        document["file"] = storage_utils.export_to_file(document, os.path.join(settings.data_dir, "exports"))
    return document


@router.post("/data/import")
async def import_data(body: DataImport, user: User = Depends(require_roles(ROLE_ADMIN))):
    logger.log(user=user, endpoint="/data/import")
    return storage_utils.import_data(connection, body.model_dump())


app.include_router(router)


if __name__ == "__main__":
    uvicorn.run("AutoPark.api.app:app", host="0.0.0.0", port=8000)
