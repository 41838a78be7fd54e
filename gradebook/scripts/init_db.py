"""
Script para inicializar las tablas del registro académico

Uso:
    python -m gradebook.scripts.init_db
"""
from gradebook.database.config import init_database


def init_db():
    """Create all tables"""
    print("Creating database tables...")
    config = init_database()
    print(f"✓ Tables created successfully! ({config.engine.dialect.name})")


if __name__ == "__main__":
    init_db()
