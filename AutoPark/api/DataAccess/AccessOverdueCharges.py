from datetime import datetime
from AutoPark.api.DBConnection import DBConnection, DATETIME_FORMAT
from AutoPark.api.Models.OverdueCharge import OverdueCharge
from AutoPark.api.Models.User import User
from AutoPark.api.DataAccess.AccessInvoices import AccessInvoices


class AccessOverdueCharges:

    def __init__(self, conn: DBConnection):
        self.cursor = conn.cursor
        self.conn = conn.connection
        self.accessinvoices = AccessInvoices(conn=conn)


    def _to_charge(self, row):
        charge_dict = dict(row)
        for key in ("original_amount", "late_fee_percentage", "late_fee_amount", "total_amount"):
            charge_dict[key] = float(charge_dict[key])
        charge_dict["created_at"] = datetime.strptime(charge_dict["created_at"], DATETIME_FORMAT)
        charge_dict["updated_at"] = datetime.strptime(charge_dict["updated_at"], DATETIME_FORMAT)
        charge_dict["invoice"] = self.accessinvoices.get_invoice(id=charge_dict.pop("invoice_id"))
        return OverdueCharge(**charge_dict)


    def _fetch_charges(self, query, params):
        self.cursor.execute(query, params)
        rows = self.cursor.fetchall()
        return [self._to_charge(row) for row in rows]


    def get_charge_byinvoice(self, invoice_id):
        query = """
        SELECT * FROM overdue_charges
        WHERE invoice_id = ?;
        """
        self.cursor.execute(query, [invoice_id])
        result = self.cursor.fetchone()
        if result is None:
            return None
        return self._to_charge(result)


    def get_charges_byuser(self, user: User):
        query = """
        SELECT o.* FROM overdue_charges o
        JOIN invoices i ON i.id = o.invoice_id
        JOIN sessions s ON s.id = i.session_id
        WHERE s.user_id = ?
        ORDER BY o.id;
        """
        return self._fetch_charges(query, [user.id])


    def get_all_charges(self):
        query = """
        SELECT * FROM overdue_charges
        ORDER BY id;
        """
        return self._fetch_charges(query, [])


    def save_charge(self, charge: OverdueCharge):
        """Insert the charge, or refresh the existing one for the same invoice."""
        query = """
        INSERT INTO overdue_charges
            (invoice_id, original_amount, late_fee_percentage, overdue_days, late_fee_amount,
             total_amount, status, created_at, updated_at)
        VALUES
            (:invoice_id, :original_amount, :late_fee_percentage, :overdue_days, :late_fee_amount,
             :total_amount, :status, :created_at, :updated_at)
        ON CONFLICT(invoice_id) DO UPDATE SET
            original_amount = excluded.original_amount,
            late_fee_percentage = excluded.late_fee_percentage,
            overdue_days = excluded.overdue_days,
            late_fee_amount = excluded.late_fee_amount,
            total_amount = excluded.total_amount,
            updated_at = excluded.updated_at
        RETURNING id;
        """
        self.cursor.execute(query, {
            "invoice_id": charge.invoice.id,
            "original_amount": charge.original_amount,
            "late_fee_percentage": charge.late_fee_percentage,
            "overdue_days": charge.overdue_days,
            "late_fee_amount": charge.late_fee_amount,
            "total_amount": charge.total_amount,
            "status": charge.status,
            "created_at": charge.created_at.strftime(DATETIME_FORMAT),
            "updated_at": charge.updated_at.strftime(DATETIME_FORMAT),
        })
        charge.id = self.cursor.fetchone()[0]
        self.conn.commit()


    def mark_paid_byinvoice(self, invoice_id, status: str):
        query = """
        UPDATE overdue_charges
        SET status = ?,
            updated_at = ?
        WHERE invoice_id = ?;
        """
        self.cursor.execute(query, [status, datetime.now().strftime(DATETIME_FORMAT), invoice_id])
        self.conn.commit()
