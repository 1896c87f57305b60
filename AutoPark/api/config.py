import os
from dataclasses import dataclass, field
from datetime import time
from typing import List

RESCAN_REJECT = "reject"
RESCAN_CHECKOUT = "checkout"


@dataclass(frozen=True)
class OvernightWindow:
    start: time
    end: time

    @property
    def enabled(self) -> bool:
        return self.start != self.end


@dataclass(frozen=True)
class Settings:
    data_dir: str
    overnight: OvernightWindow
    rescan_mode: str = RESCAN_REJECT
    qr_secret: str = "autopark-dev-secret"
    qr_expiry_seconds: int = 120
    invoice_due_days: int = 15
    late_fee_percentage: float = 10.0
    slow_request_ms: int = 300
    cors_origins: List[str] = field(default_factory=list)

    @property
    def db_path(self) -> str:
        return os.path.join(self.data_dir, "AutoParkData.db")

    @property
    def log_path(self) -> str:
        return os.path.join(self.data_dir, "access.log")


def _parse_time(name: str, default: str) -> time:
    raw = os.environ.get(name, default)
    try:
        return time.fromisoformat(raw)
    except ValueError:
        raise ValueError(f"{name} must be HH:MM, got {raw!r}")


def _parse_int(name: str, default: int) -> int:
    raw = os.environ.get(name, str(default))
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < 0:
        raise ValueError(f"{name} must not be negative")
    return value


def load_settings() -> Settings:
    # AUTOPARK_DB_DIR laat tests een tijdelijke map gebruiken
    data_dir = (
        os.environ.get("AUTOPARK_DB_DIR")
        or os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "..", "AutoPark-api-data")
    )
    os.makedirs(data_dir, exist_ok=True)

    rescan_mode = os.environ.get("AUTOPARK_RESCAN_MODE", RESCAN_REJECT).strip().lower()
    if rescan_mode not in (RESCAN_REJECT, RESCAN_CHECKOUT):
        raise ValueError(f"AUTOPARK_RESCAN_MODE must be '{RESCAN_REJECT}' or '{RESCAN_CHECKOUT}'")

    late_fee_raw = os.environ.get("AUTOPARK_LATE_FEE_PERCENTAGE", "10")
    try:
        late_fee = float(late_fee_raw)
    except ValueError:
        raise ValueError(f"AUTOPARK_LATE_FEE_PERCENTAGE must be a number, got {late_fee_raw!r}")

    origins = [o.strip() for o in os.environ.get("AUTOPARK_CORS_ORIGINS", "").split(",") if o.strip()]

    return Settings(
        data_dir=data_dir,
        overnight=OvernightWindow(
            start=_parse_time("AUTOPARK_OVERNIGHT_START", "20:00"),
            end=_parse_time("AUTOPARK_OVERNIGHT_END", "08:00"),
        ),
        rescan_mode=rescan_mode,
        qr_secret=os.environ.get("AUTOPARK_QR_SECRET", "autopark-dev-secret"),
        qr_expiry_seconds=_parse_int("AUTOPARK_QR_EXPIRY_SECONDS", 120),
        invoice_due_days=_parse_int("AUTOPARK_INVOICE_DUE_DAYS", 15),
        late_fee_percentage=late_fee,
        slow_request_ms=_parse_int("AUTOPARK_SLOW_REQUEST_MS", 300),
        cors_origins=origins,
    )
