import logging
from datetime import datetime
from typing import List

from AutoPark.api.config import Settings
from AutoPark.api.DBConnection import DBConnection
from AutoPark.api.DataAccess.AccessInvoices import AccessInvoices
from AutoPark.api.DataAccess.AccessOverdueCharges import AccessOverdueCharges
from AutoPark.api.DataAccess.AccessReports import month_bounds
from AutoPark.api.DataAccess.AccessSessions import AccessSessions
from AutoPark.api.exceptions import InvoiceAlreadyPaid, InvoiceNotFound
from AutoPark.api.Models.Invoice import Invoice, INVOICE_PAID
from AutoPark.api.Models.OverdueCharge import OverdueCharge, CHARGE_PAID
from AutoPark.api.Models.Session import PAYMENT_PAID
from AutoPark.api.Models.User import User
from AutoPark.api.session_calculator import calculate_overdue_charge, round_currency

logger = logging.getLogger(__name__)


class InvoiceService:

    def __init__(self, conn: DBConnection, settings: Settings):
        self.settings = settings
        self.accessinvoices = AccessInvoices(conn=conn)
        self.accessoverdue = AccessOverdueCharges(conn=conn)
        self.accesssessions = AccessSessions(conn=conn)


    def get_invoice(self, invoice_id) -> Invoice:
        invoice = self.accessinvoices.get_invoice(id=invoice_id)
        if invoice is None:
            raise InvoiceNotFound(f"Invoice {invoice_id} does not exist")
        return invoice


    def amount_due(self, invoice: Invoice) -> float:
        """Invoice amount, or the amount including late fees once overdue."""
        charge = self.accessoverdue.get_charge_byinvoice(invoice_id=invoice.id)
        total = charge.total_amount if charge is not None else invoice.amount
        return round_currency(total - invoice.amount_paid)


    def pay_invoice(self, invoice_id, amount: float = None, paid_at: datetime = None) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        if invoice.status == INVOICE_PAID:
            raise InvoiceAlreadyPaid(f"Invoice {invoice.invoice_number} has already been paid")

        due = self.amount_due(invoice)
        if amount is None:
            amount = due
        if amount <= 0 and due > 0:
            raise ValueError("Payment amount must be positive")

        invoice.amount_paid = round_currency(invoice.amount_paid + amount)
        if round_currency(amount - due) >= 0:
            invoice.status = INVOICE_PAID
            invoice.paid_at = (paid_at or datetime.now()).replace(microsecond=0)
        self.accessinvoices.update_payment(invoice)

        if invoice.status == INVOICE_PAID:
            invoice.session.payment_status = PAYMENT_PAID
            self.accesssessions.update_payment_status(invoice.session)
            self.accessoverdue.mark_paid_byinvoice(invoice_id=invoice.id, status=CHARGE_PAID)
            logger.info("Invoice %s paid in full", invoice.invoice_number)
        else:
            logger.info("Partial payment of %.2f on invoice %s", amount, invoice.invoice_number)
        return invoice


    def process_overdue_invoices(self, now: datetime = None) -> List[OverdueCharge]:
        now = (now or datetime.now()).replace(microsecond=0)
        charges = []
        for invoice in self.accessinvoices.get_overdue_invoices(now=now):
            overdue_days = (now.date() - invoice.due_date.date()).days
            if overdue_days <= 0:
                continue
            late_fee = calculate_overdue_charge(
                invoice.amount, overdue_days, self.settings.late_fee_percentage
            )
            charge = OverdueCharge(
                id=None,
                invoice=invoice,
                original_amount=invoice.amount,
                late_fee_percentage=self.settings.late_fee_percentage,
                overdue_days=overdue_days,
                late_fee_amount=late_fee,
                total_amount=round_currency(invoice.amount + late_fee),
                created_at=now,
                updated_at=now,
            )
            self.accessoverdue.save_charge(charge)
            charges.append(charge)

        logger.info("Processed %d overdue invoices", len(charges))
        return charges


    def monthly_statement(self, user: User, year: int, month: int) -> dict:
        start, end = month_bounds(year, month)
        sessions = self.accesssessions.get_sessions_stopped_between(start, end, user=user)

        invoices = []
        total_charges = 0.0
        total_late_fees = 0.0
        total_paid = 0.0
        for session in sessions:
            total_charges += session.cost
            invoice = self.accessinvoices.get_invoice_bysession(session_id=session.id)
            if invoice is None:
                continue
            charge = self.accessoverdue.get_charge_byinvoice(invoice_id=invoice.id)
            if charge is not None:
                total_late_fees += charge.late_fee_amount
            total_paid += invoice.amount_paid
            invoices.append(invoice.to_dict())

        total_due = round_currency(total_charges + total_late_fees)
        return {
            "user_id": user.id,
            "year": year,
            "month": month,
            "total_sessions": len(sessions),
            "total_hours": round(sum(s.duration_minutes for s in sessions) / 60, 2),
            "total_charges": round_currency(total_charges),
            "total_late_fees": round_currency(total_late_fees),
            "total_due": total_due,
            "total_paid": round_currency(total_paid),
            "outstanding": round_currency(max(total_due - total_paid, 0)),
            "sessions": [s.to_dict() for s in sessions],
            "invoices": invoices,
        }
