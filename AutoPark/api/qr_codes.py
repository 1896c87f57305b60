import hashlib
import hmac
import time
from io import BytesIO

import qrcode

from AutoPark.api.exceptions import InvalidQRCode
from AutoPark.api.Models.QRCodeData import QRCodeData, QR_ENTRY, QR_EXIT
from AutoPark.api.Models.User import User
from AutoPark.api.Models.Vehicle import Vehicle


def sign(data: QRCodeData, secret: str) -> str:
    return hmac.new(
        secret.encode("utf-8"),
        data.signing_fields().encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def generate(user: User, vehicle: Vehicle, qr_type: str, secret: str, now: float = None) -> QRCodeData:
    if qr_type not in (QR_ENTRY, QR_EXIT):
        raise InvalidQRCode(InvalidQRCode.INVALID_FORMAT, f"Unknown QR type {qr_type!r}")
    data = QRCodeData(
        user_id=user.id,
        licenseplate=vehicle.licenseplate,
        timestamp=int(now if now is not None else time.time()),
        qr_type=qr_type,
    )
    data.security_hash = sign(data, secret)
    return data


def parse_and_validate(text: str, secret: str, expiry_seconds: int, now: float = None) -> QRCodeData:
    data = QRCodeData.from_qr_string(text or "")
    if data is None:
        raise InvalidQRCode(InvalidQRCode.INVALID_FORMAT)

    if not hmac.compare_digest(data.security_hash, sign(data, secret)):
        raise InvalidQRCode(InvalidQRCode.INVALID_HASH)

    age = (now if now is not None else time.time()) - data.timestamp
    if age > expiry_seconds or age < -expiry_seconds:
        raise InvalidQRCode(InvalidQRCode.EXPIRED)

    return data


def render_png(payload: str) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
