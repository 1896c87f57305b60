QR_PREFIX = "AUTOPARK"
QR_ENTRY = "ENTRY"
QR_EXIT = "EXIT"


class QRCodeData:

    def __init__(self,
                 user_id: int,
                 licenseplate: str,
                 timestamp: int,
                 qr_type: str = QR_ENTRY,
                 security_hash: str = ""):

        self.user_id = user_id
        self.licenseplate = licenseplate
        self.timestamp = timestamp
        self.qr_type = qr_type
        self.security_hash = security_hash


    def signing_fields(self) -> str:
        return f"{self.user_id}|{self.licenseplate}|{self.timestamp}|{self.qr_type}"


    def to_qr_string(self) -> str:
        # AUTOPARK|user_id|plate|timestamp|type|hash
        return f"{QR_PREFIX}|{self.signing_fields()}|{self.security_hash}"


    @classmethod
    def from_qr_string(cls, text: str):
        parts = text.strip().split("|")
        if len(parts) != 6 or parts[0] != QR_PREFIX:
            return None
        _, user_id, plate, timestamp, qr_type, security_hash = parts
        if qr_type not in (QR_ENTRY, QR_EXIT) or not plate:
            return None
        try:
            return cls(
                user_id=int(user_id),
                licenseplate=plate,
                timestamp=int(timestamp),
                qr_type=qr_type,
                security_hash=security_hash,
            )
        except ValueError:
            return None


    def __repr__(self):
        return f"QRCodeData({self.licenseplate}, {self.qr_type})"
