"""
Server configuration.

Every value can be overridden through the environment (or a .env file,
loaded by main.py before this module is imported):

  PORT=4520
  HIVE_MAX_EVENTS=10000
  HIVE_CLIENT_DIST=/path/to/client/dist
"""

import os

BACKEND_ROOT = os.path.dirname(os.path.abspath(__file__))
REPO_ROOT = os.path.dirname(BACKEND_ROOT)

HOST = os.environ.get("HIVE_HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "4520"))

MAX_EVENTS = int(os.environ.get("HIVE_MAX_EVENTS", "10000"))
INIT_EVENTS = int(os.environ.get("HIVE_INIT_EVENTS", "100"))
SUBSCRIBER_QUEUE_SIZE = int(os.environ.get("HIVE_SUBSCRIBER_QUEUE_SIZE", "1000"))

CLIENT_DIST = os.environ.get("HIVE_CLIENT_DIST", os.path.join(REPO_ROOT, "client", "dist"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("HIVE_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

LOG_LEVEL = os.environ.get("HIVE_LOG_LEVEL", "INFO").upper()
