from datetime import datetime
from .Session import Session

INVOICE_PENDING = "PENDING"
INVOICE_PAID = "PAID"


class Invoice:

    def __init__(self,
                 id: int,
                 invoice_number: str,
                 session: Session,
                 amount: float,
                 issued_at: datetime,
                 due_date: datetime,
                 status: str = INVOICE_PENDING,
                 amount_paid: float = 0.0,
                 paid_at: datetime = None):

        self.id = id
        self.invoice_number = invoice_number
        self.session = session
        self.amount = amount
        self.issued_at = issued_at
        self.due_date = due_date
        self.status = status
        self.amount_paid = amount_paid
        self.paid_at = paid_at


    @property
    def user(self):
        return self.session.user


    @property
    def balance(self) -> float:
        return round(self.amount - self.amount_paid, 2)


    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoice_number": self.invoice_number,
            "session_id": self.session.id,
            "user_id": self.session.user.id,
            "parking_lot_id": self.session.parking_lot.id,
            "licenseplate": self.session.licenseplate,
            "amount": self.amount,
            "amount_paid": self.amount_paid,
            "balance": self.balance,
            "status": self.status,
            "issued_at": self.issued_at.strftime("%Y-%m-%d %H:%M:%S"),
            "due_date": self.due_date.strftime("%Y-%m-%d %H:%M:%S"),
            "paid_at": self.paid_at.strftime("%Y-%m-%d %H:%M:%S") if self.paid_at else None,
        }


    def __repr__(self):
        return self.invoice_number
