"""Configuration for ProtoBuddy MCP server."""

import os
from pathlib import Path

# Server settings
HTTP_PORT = int(os.getenv("HTTP_PORT", "8080"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Compatibility result cache
CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", "3600"))  # Cache checks for 1 hour
CACHE_MAX_SIZE = int(os.getenv("CACHE_MAX_SIZE", "10000"))  # Max cached pairs

# Bulk evaluation
BULK_BATCH_SIZE = int(os.getenv("BULK_BATCH_SIZE", "10"))  # Checks run concurrently per batch
MAX_BULK_COMPONENTS = int(os.getenv("MAX_BULK_COMPONENTS", "200"))  # Per tool call

# Catalog paths
_PACKAGE_DATA_DIR = Path(__file__).parent.parent.parent / "data"
DATA_DIR = Path(os.getenv("PROTOBUDDY_DATA_DIR", str(_PACKAGE_DATA_DIR)))
DB_PATH = Path(os.getenv("PROTOBUDDY_DB_PATH", str(DATA_DIR / "catalog.db")))
SEED_FILE = DATA_DIR / "catalog.json"
