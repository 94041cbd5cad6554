# config.py
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

class Config:
    # PDF export storage
    EXPORTS_DIR = os.getenv("EXPORTS_DIR", (BASE_DIR / "exports").as_posix())

    # Assets. Empty means "use the built-in fallback" (text placeholder / Helvetica).
    LOGO_PATH = os.getenv("PDF_LOGO_PATH", "")
    FONT_REGULAR_PATH = os.getenv("PDF_FONT_REGULAR", "")
    FONT_BOLD_PATH = os.getenv("PDF_FONT_BOLD", "")
    FONT_ITALIC_PATH = os.getenv("PDF_FONT_ITALIC", "")

    # Document text
    CURRENCY_PREFIX = os.getenv("PDF_CURRENCY_PREFIX", "Rs. ")
    DEFAULT_COMPANY_NAME = os.getenv("COMPANY_NAME", "AICERA Systems Private Limited")
    DEFAULT_PAYMENT_TERMS = os.getenv("PAYMENT_TERMS", "30 days from the date of Invoice")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
