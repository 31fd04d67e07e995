"""Root conftest: shared test configuration."""

import os

# Tests never reach a real MongoDB: no startup ping, readable logs
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGODB_CONNECT_ON_STARTUP", "false")
os.environ.setdefault("LOG_FORMAT", "text")
