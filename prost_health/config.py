"""
Prost Health Screening - Configuration
======================================
Centralised config for branding, logging and report metadata.
Loads overrides from the project-level .env file.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PACKAGE_DIR = Path(__file__).resolve().parent                 # prost_health/
PROJECT_ROOT = PACKAGE_DIR.parent

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")

VERSION = "1.0.0"

# ── Logging ─────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("PROST_LOG_LEVEL", "INFO")
LOG_FILE: str = os.getenv("PROST_LOG_FILE", "")               # empty = console only

# ── Branding (header, footer, filename) ─────────────────────────────────
BRAND_NAME: str = os.getenv("PROST_BRAND_NAME", "Prost Health")
BRAND_TAGLINE: str = os.getenv("PROST_BRAND_TAGLINE", "MRI-First Prostate Screening")
COMPANY_NAME: str = os.getenv("PROST_COMPANY_NAME", "Prost Health Ltd")
CONTACT_EMAIL: str = os.getenv("PROST_CONTACT_EMAIL", "hello@prost.health")
SITE_URL: str = os.getenv("PROST_SITE_URL", "www.prost.health")
FILENAME_PREFIX: str = os.getenv("PROST_FILENAME_PREFIX", "Prost_Health_Screening")

# ── Guideline citation ──────────────────────────────────────────────────
GUIDELINE_NAME = "NICE NG131"
