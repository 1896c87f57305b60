import sqlite3

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

class DBConnection:

    def __init__(self, database_path):
        # TestClient draait requests in een andere thread
        self.connection = sqlite3.connect(database_path, check_same_thread=False)
        self.connection.row_factory = sqlite3.Row
        self.cursor = self.connection.cursor()

        self.cursor.execute("PRAGMA foreign_keys = ON")
        self.connection.commit()

        self.create_database_and_tables()


    def create_database_and_tables(self):
        tables_query = """
        CREATE TABLE IF NOT EXISTS users(
            id INTEGER PRIMARY KEY,
            username VARCHAR(255) NOT NULL UNIQUE,
            name VARCHAR(255) NOT NULL,
            email VARCHAR(255) NOT NULL,
            password VARCHAR(255) NOT NULL,
            created_at DATETIME NOT NULL,
            phone VARCHAR(255) NOT NULL,
            role VARCHAR(255) NOT NULL,
            active BOOL NOT NULL
        );

        CREATE TABLE IF NOT EXISTS parking_lots(
            id INTEGER PRIMARY KEY,
            name VARCHAR(255) NOT NULL,
            address VARCHAR(255) NOT NULL,
            city VARCHAR(255) NOT NULL,
            total_spots INTEGER NOT NULL CHECK (total_spots >= 0),
            available_spots INTEGER NOT NULL CHECK (available_spots >= 0 AND available_spots <= total_spots),
            opening_time VARCHAR(5) NOT NULL DEFAULT '',
            closing_time VARCHAR(5) NOT NULL DEFAULT '',
            is_24_hours BOOL NOT NULL DEFAULT 0,
            contact_number VARCHAR(255) NOT NULL DEFAULT '',
            description TEXT NOT NULL DEFAULT '',
            created_at DATETIME NOT NULL
        );

        CREATE TABLE IF NOT EXISTS parking_lots_coordinates(
            id INTEGER PRIMARY KEY,
            lat REAL NOT NULL,
            lng REAL NOT NULL,
            FOREIGN KEY (id) REFERENCES parking_lots(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS parking_rates(
            id INTEGER PRIMARY KEY,
            parking_lot_id INTEGER NOT NULL,
            rate_type VARCHAR(20) NOT NULL,
            price_per_hour DECIMAL(10,2) NOT NULL DEFAULT 0,
            price_per_day DECIMAL(10,2) NOT NULL DEFAULT 0,
            overnight_price DECIMAL(10,2) NOT NULL DEFAULT 0,
            min_charge_amount DECIMAL(10,2) NOT NULL DEFAULT 0,
            max_charge_per_day DECIMAL(10,2) NOT NULL DEFAULT 0,
            vip_multiplier REAL NOT NULL DEFAULT 1.0,
            is_active BOOL NOT NULL DEFAULT 1,
            created_at DATETIME NOT NULL,
            updated_at DATETIME NOT NULL,
            FOREIGN KEY (parking_lot_id) REFERENCES parking_lots(id) ON DELETE CASCADE
        );

        CREATE UNIQUE INDEX IF NOT EXISTS ux_active_rate_per_type
            ON parking_rates(parking_lot_id, rate_type)
            WHERE is_active = 1;

        CREATE TABLE IF NOT EXISTS vehicles(
            id INTEGER PRIMARY KEY,
            user_id INTEGER NOT NULL,
            licenseplate VARCHAR(255) NOT NULL UNIQUE,
            vehicle_type VARCHAR(255) NOT NULL DEFAULT '',
            brand VARCHAR(255) NOT NULL DEFAULT '',
            model VARCHAR(255) NOT NULL DEFAULT '',
            color VARCHAR(255) NOT NULL DEFAULT '',
            rate_type VARCHAR(20) NOT NULL DEFAULT 'NORMAL',
            created_at DATETIME NOT NULL,
            FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS sessions(
            id INTEGER PRIMARY KEY,
            parking_lot_id INTEGER NOT NULL,
            vehicle_id INTEGER NOT NULL,
            user_id INTEGER NOT NULL,
            licenseplate VARCHAR(255) NOT NULL,
            rate_type VARCHAR(20) NOT NULL,
            rate_id INTEGER NOT NULL,
            started DATETIME NOT NULL,
            stopped DATETIME,
            duration_minutes INT NOT NULL DEFAULT 0,
            cost DECIMAL(10,2) NOT NULL DEFAULT 0,
            status VARCHAR(20) NOT NULL,
            payment_status VARCHAR(20) NOT NULL,
            FOREIGN KEY (user_id) REFERENCES users(id),
            FOREIGN KEY (parking_lot_id) REFERENCES parking_lots(id),
            FOREIGN KEY (vehicle_id) REFERENCES vehicles(id),
            FOREIGN KEY (rate_id) REFERENCES parking_rates(id)
        );

        CREATE UNIQUE INDEX IF NOT EXISTS ux_one_active_session_per_vehicle
            ON sessions(vehicle_id)
            WHERE status = 'CHECKED_IN';

        CREATE TABLE IF NOT EXISTS invoices(
            id INTEGER PRIMARY KEY,
            invoice_number VARCHAR(255) NOT NULL UNIQUE,
            session_id INTEGER NOT NULL UNIQUE,
            amount DECIMAL(10,2) NOT NULL,
            amount_paid DECIMAL(10,2) NOT NULL DEFAULT 0,
            status VARCHAR(20) NOT NULL,
            issued_at DATETIME NOT NULL,
            due_date DATETIME NOT NULL,
            paid_at DATETIME,
            FOREIGN KEY (session_id) REFERENCES sessions(id)
        );

        CREATE TABLE IF NOT EXISTS overdue_charges(
            id INTEGER PRIMARY KEY,
            invoice_id INTEGER NOT NULL UNIQUE,
            original_amount DECIMAL(10,2) NOT NULL,
            late_fee_percentage REAL NOT NULL,
            overdue_days INTEGER NOT NULL,
            late_fee_amount DECIMAL(10,2) NOT NULL,
            total_amount DECIMAL(10,2) NOT NULL,
            status VARCHAR(20) NOT NULL,
            created_at DATETIME NOT NULL,
            updated_at DATETIME NOT NULL,
            FOREIGN KEY (invoice_id) REFERENCES invoices(id)
        );
        """

        self.cursor.executescript(tables_query)


    def close_connection(self):
        self.cursor.close()
        self.connection.close()
