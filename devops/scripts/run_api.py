"""
Levanta la API del registro académico con uvicorn

Uso:
    python devops/scripts/run_api.py                     # desarrollo, con auto-reload
    python devops/scripts/run_api.py --production        # varios workers, sin reload
    python devops/scripts/run_api.py --database-url sqlite:///./demo.db

La URL de la base de datos también puede venir de DATABASE_URL.
"""
import argparse
import os

import uvicorn

APP_TARGET = "gradebook.api.main:app"


def main():
    parser = argparse.ArgumentParser(description="Run Gradebook API Server")
    parser.add_argument("--production", action="store_true", help="Multiple workers, no auto-reload")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--database-url", help="Overrides DATABASE_URL")
    args = parser.parse_args()

    if args.database_url:
        # Los workers de uvicorn importan la app de nuevo y leen el entorno
        os.environ["DATABASE_URL"] = args.database_url

    mode = "production" if args.production else "development"
    print(f"Gradebook API ({mode}) on http://{args.host}:{args.port}  docs: /docs")

    uvicorn.run(
        APP_TARGET,
        host=args.host,
        port=args.port,
        reload=not args.production,
        workers=4 if args.production else None,
        log_level="warning" if args.production else "info",
    )


if __name__ == "__main__":
    main()
