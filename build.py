#!/usr/bin/env python3
"""
Build script for deployment.
Creates the record table and seeds the default academy settings.
"""
from app import create_app
from app_models import db
from config import ProductionConfig
from security import get_store


def initialize_database():
    """Initialize storage for production deployment."""
    app = create_app(ProductionConfig)
    with app.app_context():
        print("Creating record table...")
        db.create_all()

        store = get_store()
        settings = store.get_settings()
        store.update_settings(settings)
        print(f"Academy settings ready: {settings.academy_name}")

        print("Storage initialization completed successfully!")


if __name__ == "__main__":
    initialize_database()
