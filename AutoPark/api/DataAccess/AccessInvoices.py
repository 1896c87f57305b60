from datetime import datetime
from AutoPark.api.DBConnection import DBConnection, DATETIME_FORMAT
from AutoPark.api.Models.Invoice import Invoice, INVOICE_PENDING
from AutoPark.api.Models.User import User
from AutoPark.api.DataAccess.AccessSessions import AccessSessions


class AccessInvoices:

    def __init__(self, conn: DBConnection):
        self.cursor = conn.cursor
        self.conn = conn.connection
        self.accesssessions = AccessSessions(conn=conn)


    def _to_invoice(self, row):
        invoice_dict = dict(row)
        invoice_dict["amount"] = float(invoice_dict["amount"])
        invoice_dict["amount_paid"] = float(invoice_dict["amount_paid"])
        invoice_dict["issued_at"] = datetime.strptime(invoice_dict["issued_at"], DATETIME_FORMAT)
        invoice_dict["due_date"] = datetime.strptime(invoice_dict["due_date"], DATETIME_FORMAT)
        if invoice_dict.get("paid_at") is not None:
            invoice_dict["paid_at"] = datetime.strptime(invoice_dict["paid_at"], DATETIME_FORMAT)
        invoice_dict["session"] = self.accesssessions.get_session(id=invoice_dict.pop("session_id"))
        return Invoice(**invoice_dict)


    def _fetch_invoices(self, query, params):
        self.cursor.execute(query, params)
        rows = self.cursor.fetchall()
        return [self._to_invoice(row) for row in rows]


    def get_invoice(self, id):
        query = """
        SELECT * FROM invoices
        WHERE id = ?;
        """
        self.cursor.execute(query, [id])
        result = self.cursor.fetchone()
        if result is None:
            return None
        return self._to_invoice(result)


    def get_invoice_bysession(self, session_id):
        query = """
        SELECT * FROM invoices
        WHERE session_id = ?;
        """
        self.cursor.execute(query, [session_id])
        result = self.cursor.fetchone()
        if result is None:
            return None
        return self._to_invoice(result)


    def get_invoices_byuser(self, user: User):
        query = """
        SELECT i.* FROM invoices i
        JOIN sessions s ON s.id = i.session_id
        WHERE s.user_id = ?
        ORDER BY i.issued_at DESC, i.id DESC;
        """
        return self._fetch_invoices(query, [user.id])


    def get_all_invoices(self):
        query = """
        SELECT * FROM invoices
        ORDER BY issued_at DESC, id DESC;
        """
        return self._fetch_invoices(query, [])


    def get_overdue_invoices(self, now: datetime):
        query = """
        SELECT * FROM invoices
        WHERE status = ?
        AND due_date < ?
        ORDER BY due_date, id;
        """
        return self._fetch_invoices(query, [INVOICE_PENDING, now.strftime(DATETIME_FORMAT)])


    def add_invoice(self, invoice: Invoice, commit: bool = True):
        query = """
        INSERT INTO invoices
            (invoice_number, session_id, amount, amount_paid, status, issued_at, due_date, paid_at)
        VALUES
            (:invoice_number, :session_id, :amount, :amount_paid, :status, :issued_at, :due_date, NULL)
        RETURNING id;
        """
        self.cursor.execute(query, {
            "invoice_number": invoice.invoice_number,
            "session_id": invoice.session.id,
            "amount": invoice.amount,
            "amount_paid": invoice.amount_paid,
            "status": invoice.status,
            "issued_at": invoice.issued_at.strftime(DATETIME_FORMAT),
            "due_date": invoice.due_date.strftime(DATETIME_FORMAT),
        })
        invoice.id = self.cursor.fetchone()[0]
        if commit:
            self.conn.commit()


    def update_payment(self, invoice: Invoice):
        query = """
        UPDATE invoices
        SET amount_paid = :amount_paid,
            status = :status,
            paid_at = :paid_at
        WHERE id = :id;
        """
        self.cursor.execute(query, {
            "id": invoice.id,
            "amount_paid": invoice.amount_paid,
            "status": invoice.status,
            "paid_at": invoice.paid_at.strftime(DATETIME_FORMAT) if invoice.paid_at else None,
        })
        self.conn.commit()
