from datetime import datetime
from .Invoice import Invoice

CHARGE_PENDING = "PENDING"
CHARGE_PAID = "PAID"


class OverdueCharge:

    def __init__(self,
                 id: int,
                 invoice: Invoice,
                 original_amount: float,
                 late_fee_percentage: float,
                 overdue_days: int,
                 late_fee_amount: float,
                 total_amount: float,
                 status: str = CHARGE_PENDING,
                 created_at: datetime = None,
                 updated_at: datetime = None):

        self.id = id
        self.invoice = invoice
        self.original_amount = original_amount
        self.late_fee_percentage = late_fee_percentage
        self.overdue_days = overdue_days
        self.late_fee_amount = late_fee_amount
        self.total_amount = total_amount
        self.status = status
        self.created_at = created_at or datetime.now().replace(microsecond=0)
        self.updated_at = updated_at or self.created_at


    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoice_id": self.invoice.id,
            "invoice_number": self.invoice.invoice_number,
            "user_id": self.invoice.user.id,
            "original_amount": self.original_amount,
            "late_fee_percentage": self.late_fee_percentage,
            "overdue_days": self.overdue_days,
            "late_fee_amount": self.late_fee_amount,
            "total_amount": self.total_amount,
            "status": self.status,
            "created_at": self.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            "updated_at": self.updated_at.strftime("%Y-%m-%d %H:%M:%S"),
        }


    def __repr__(self):
        return f"OverdueCharge({self.id}, {self.invoice.invoice_number}, {self.overdue_days}d)"
