# src/aqlkit/config.py
"""
Module Description:
Defines the central configuration dictionary (CONFIG) for aqlkit.
Loads connection settings and query logging switches from environment
variables using python-dotenv, and offers a validation function that reports
missing connection settings.

Links:
- python-dotenv: https://github.com/theskumar/python-dotenv

Sample Input/Output:

- Accessing config values:
  from aqlkit.config import CONFIG
  db_host = CONFIG["arango"]["host"]
  print_queries = CONFIG["logging"]["print_queries"]

- Running validation:
  python -m aqlkit.config
  (Prints validation status and exits with 0 or 1)
"""
import os
import sys
from dotenv import load_dotenv
from loguru import logger

# Load environment variables
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


CONFIG = {
    "arango": {
        "host": os.getenv("ARANGO_HOST", "http://localhost:8529"),
        "user": os.getenv("ARANGO_USER", "root"),
        "password": os.getenv("ARANGO_PASSWORD", ""),
        "db_name": os.getenv("ARANGO_DB_NAME", "_system"),
    },
    "logging": {
        "print_queries": _env_flag("AQLKIT_PRINT_QUERIES"),
        "debug_filters": _env_flag("AQLKIT_DEBUG_FILTERS"),
        "level": os.getenv("AQLKIT_LOG_LEVEL", "INFO"),
    },
}


def validate_config() -> bool:
    """
    Validate that the connection settings are present.
    Returns True if valid, False otherwise. Logs errors.
    """
    # an empty password is a valid development setup
    required = {k: v for k, v in CONFIG["arango"].items() if k != "password"}
    missing = [f"ARANGO_{k.upper()}" for k, v in required.items() if not v]

    if missing:
        logger.error(f"Missing ArangoDB environment variables: {', '.join(missing)}")
        return False

    logger.info("Configuration environment variables validated successfully.")
    return True


if __name__ == "__main__":
    logger.remove()
    logger.add(sys.stderr, level="INFO")

    logger.info("Running configuration validation...")
    if validate_config():
        print("✅ VALIDATION COMPLETE - Required environment variables are set.")
        sys.exit(0)
    else:
        print("❌ VALIDATION FAILED - Missing required environment variables. See logs for details.")
        sys.exit(1)
