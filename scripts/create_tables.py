#!/usr/bin/env python3
"""
Create all tables directly from the models (local development).
Production databases should use `alembic upgrade head` instead.
"""
import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv
load_dotenv(project_root / ".env")

from fraudlr.core.config import Settings
from fraudlr.db.base import Base
from fraudlr.db.session import build_engine
import fraudlr.models  # noqa: F401  register all models with Base

settings = Settings()
engine = build_engine(settings.DATABASE_URL)

print("Creating database tables...")
Base.metadata.create_all(bind=engine)
print("All tables created successfully!")
