import os
import sys
import argparse
import asyncio
import subprocess
import logging
from dotenv import load_dotenv

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

# Load environment variables from .env
load_dotenv()

REQUIRED_VARS = {
    "api": ["POSTGRES_DATABASE_URL", "RABBITMQ_URL", "JWT_SECRET"],
    "usage-worker": ["POSTGRES_DATABASE_URL", "RABBITMQ_URL", "PLATE_RECOGNIZER_KEY", "FIREBASE_PROJECT_ID"],
}


def run_api():
    """Run the API server with Uvicorn"""
    logger.info("Starting API server...")
    try:
        subprocess.run([sys.executable, "-m", "uvicorn", "charger_alerts.main:app", "--host", "0.0.0.0",
                        "--port", "8079"], check=True)
    except subprocess.CalledProcessError as e:
        logger.error(f"Error running API server: {str(e)}")
        sys.exit(1)


def run_usage_worker():
    """Run the usage report worker"""
    from charger_alerts.workers.usage_report_processor import main as worker_main
    logger.info("Starting usage report worker...")
    asyncio.run(worker_main())


def check_environment(component: str):
    """Check the required environment variables"""
    missing_vars = [var for var in REQUIRED_VARS[component] if not os.getenv(var)]

    if missing_vars:
        logger.error(f"Missing environment variables: {', '.join(missing_vars)}")
        logger.error("Create a .env file with the required environment variables")
        sys.exit(1)

    logger.info("Environment variables checked")


def main():
    parser = argparse.ArgumentParser(description="Run a component of the charger alerts service")
    parser.add_argument("--component", choices=["api", "usage-worker"],
                        default="api", help="Component to run")
    parser.add_argument("--skip-checks", action="store_true", help="Skip environment checks")

    args = parser.parse_args()

    if not args.skip_checks:
        check_environment(args.component)

    if args.component == "api":
        run_api()
    elif args.component == "usage-worker":
        run_usage_worker()


if __name__ == "__main__":
    main()
