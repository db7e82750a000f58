"""Engine configuration read from environment variables."""

import os


class EngineConfig:
    """Listing engine settings."""

    # Listing cache
    LISTING_CACHE_TTL_SECONDS = int(os.environ.get("LISTING_CACHE_TTL_SECONDS", "300"))  # 5 minutes

    # Supabase tables
    SUPABASE_URL = os.environ.get("SUPABASE_URL")
    SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
    LISTINGS_TABLE = os.environ.get("LISTINGS_TABLE", "property_listings")
    COMMISSION_RULES_TABLE = os.environ.get("COMMISSION_RULES_TABLE", "commission_rules")

    # Image uploads
    UPLOAD_DIR = os.environ.get("UPLOAD_DIR", os.path.join(os.getcwd(), "uploads", "img"))
    UPLOAD_URL_PREFIX = os.environ.get("UPLOAD_URL_PREFIX", "/img/")

    # Reject overlapping or unordered commission rules instead of warning
    COMMISSION_RULES_STRICT = os.environ.get("COMMISSION_RULES_STRICT", "false").lower() == "true"
