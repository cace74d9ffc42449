#!/usr/bin/env python3
"""
ProjectPilot API Server Runner

Usage:
  python run.py                    # Development mode
  python run.py --production       # Production mode
  python run.py --train-models     # Train the prediction models, then start
"""
import argparse
import asyncio
import os
import sys
from pathlib import Path

import uvicorn


def print_banner(mode="development", port=8000):
    """Print startup banner"""
    print("PROJECTPILOT API SERVER")
    print("=" * 80)
    print(f"Mode: {mode.upper()}")
    print(f"Working Directory: {Path(__file__).parent}")
    print(f"Server URL: http://localhost:{port}")
    print(f"API Index: http://localhost:{port}/api/v1/")
    print(f"Health Check: http://localhost:{port}/api/v1/healthz")
    print("=" * 80)


async def check_database_connection():
    """Check database connection"""
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    from projectpilot.core.database import close_db, engine

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        print("Database connection verified")
        return True
    except (SQLAlchemyError, OSError) as e:
        print(f"Database connection failed: {e}")
        return False
    finally:
        await close_db()


def train_models():
    """Train and save the prediction models into AI_MODEL_DIR"""
    from projectpilot.config import settings
    from projectpilot.ml.training import save_models, train_models as build_models

    print(f"Training prediction models into {settings.ai_model_dir}...")
    paths = save_models(build_models(), settings.ai_model_dir)
    for path in paths:
        print(f"   saved {path}")


def get_server_config(production=False, port=8000):
    """Get server configuration"""
    config = {
        "app": "projectpilot.main:app",
        "host": "0.0.0.0",
        "port": port,
        "log_level": "info"
    }

    if production:
        config.update({
            "workers": min(4, (os.cpu_count() or 1) + 1),
            "access_log": True,
            "use_colors": False,
            "reload": False
        })
    else:
        config.update({
            "reload": True,
            "reload_dirs": ["projectpilot"],
            "reload_includes": ["*.py"],
            "reload_excludes": ["*.pyc", "__pycache__"]
        })

    return config


def main():
    """Main server entry point"""
    parser = argparse.ArgumentParser(description='ProjectPilot API Server')
    parser.add_argument('--production', action='store_true', help='Run in production mode')
    parser.add_argument('--port', type=int, default=int(os.getenv("PORT", "8000")), help='Port to listen on')
    parser.add_argument('--train-models', action='store_true', help='Train prediction models before starting')
    parser.add_argument('--skip-db-check', action='store_true', help='Skip database connection check')

    args = parser.parse_args()

    os.chdir(Path(__file__).parent)

    mode = "production" if args.production else "development"
    print_banner(mode, args.port)

    if args.train_models:
        train_models()
        print("=" * 80)

    if not args.skip_db_check:
        print("Checking database connection...")
        if not asyncio.run(check_database_connection()):
            sys.exit(1)

    try:
        print("Starting server...")
        uvicorn.run(**get_server_config(args.production, args.port))
    except KeyboardInterrupt:
        print("Server stopped by user")


if __name__ == "__main__":
    main()
