"""Application settings read from the environment (and a .env file)."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    gemini_api_key: Optional[str] = None
    gemini_model: str = 'gemini-2.5-flash'
    storage_path: str = 'moduquote_data_v1.json'
    default_tax_rate: str = '10'
    validity_days: int = 30
    log_level: str = 'INFO'
    port: int = 5001
    debug: bool = False


def load_settings() -> Settings:
    """Load settings from environment variables.

    Values in a local .env file are loaded first and never override
    variables that are already set.
    """
    load_dotenv()

    return Settings(
        gemini_api_key=os.getenv('GEMINI_API_KEY') or None,
        gemini_model=os.getenv('GEMINI_MODEL', 'gemini-2.5-flash'),
        storage_path=os.getenv('MODUQUOTE_STORAGE_PATH', 'moduquote_data_v1.json'),
        default_tax_rate=os.getenv('DEFAULT_TAX_RATE', '10'),
        validity_days=int(os.getenv('QUOTE_VALIDITY_DAYS', '30')),
        log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        port=int(os.getenv('PORT', '5001')),
        debug=os.getenv('DEBUG', 'False').lower() == 'true'
    )
