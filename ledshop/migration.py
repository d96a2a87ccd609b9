"""
ledshop/migration.py
--------------------
Brings databases created by older releases up to the current schema.
Missing tables are created; missing columns are added with ALTER TABLE.
Run through `flask patch-db`.
"""
import logging
from sqlalchemy import text, inspect
from ledshop import db

logger = logging.getLogger(__name__)

# (table, column, DDL type clause)
COLUMN_PATCHES = [
    ('users',  'is_admin',           'BOOLEAN DEFAULT FALSE NOT NULL'),
    ('users',  'can_view_prices',    'BOOLEAN DEFAULT FALSE NOT NULL'),
    ('users',  'can_order_products', 'BOOLEAN DEFAULT FALSE NOT NULL'),
    ('users',  'updated_at',         'TIMESTAMP'),
    ('orders', 'square_order_id',    'VARCHAR(255)'),
    ('orders', 'custom_order_data',  'TEXT'),
    ('orders', 'external_state',     'VARCHAR(50)'),
    ('orders', 'admin_notes',        'TEXT'),
    ('orders', 'updated_at',         'TIMESTAMP'),
    ('points_shop_items', 'image_key', 'VARCHAR(500)'),
]


def run_auto_migration(app) -> list:
    """Apply every missing patch and return a description of each one applied."""
    applied = []
    with app.app_context():
        logger.info("🔄 Checking database schema...")
        try:
            # 1. Create missing tables
            db.create_all()

            # 2. Add columns to existing tables
            with db.engine.connect() as conn:
                inspector = inspect(conn)
                existing_tables = set(inspector.get_table_names())

                def column_exists(table, column):
                    return column in {c['name'] for c in inspector.get_columns(table)}

                for table, column, ddl in COLUMN_PATCHES:
                    if table not in existing_tables or column_exists(table, column):
                        continue
                    logger.info(f"🛠️  Adding '{column}' to {table}")
                    conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}"))
                    applied.append(f"Added {table}.{column}")

                conn.commit()
        except Exception as e:
            logger.error(f"❌ Schema migration failed: {e}")
            raise

    logger.info("✅ Database schema check complete.")
    return applied
