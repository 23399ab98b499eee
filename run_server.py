"""Entry point for running the collaboration API with Uvicorn."""
from __future__ import annotations

import logging
import os

import uvicorn


def main() -> None:
  logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
  port = int(os.getenv("SCHOLARLINK_PORT", "8000"))
  reload = os.getenv("UVICORN_RELOAD", "false").lower() == "true"
  uvicorn.run("scholarlink.main:app", host="0.0.0.0", port=port, reload=reload)


if __name__ == "__main__":
  main()
