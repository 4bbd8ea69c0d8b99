"""
Process-wide settings. ``.env`` is loaded once here so module-level
``os.getenv`` reads in the services see it; import this module first.
"""
import os

from dotenv import load_dotenv

load_dotenv()

APP_TITLE = os.getenv("APP_TITLE", "AIMI Analyst API")
APP_VERSION = os.getenv("APP_VERSION", "0.1.0")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
