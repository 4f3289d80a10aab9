import os
from dotenv import load_dotenv

load_dotenv()


def _split_list(raw: str):
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    # Blood types accepted on top of the eight ABO/Rh groups
    extra_blood_types: list = _split_list(os.getenv("EXTRA_BLOOD_TYPES", ""))

    # Donation rules
    max_expiry_days: int = int(os.getenv("MAX_EXPIRY_DAYS", "45"))
    min_storage_temp: float = float(os.getenv("MIN_STORAGE_TEMP", "4"))
    max_storage_temp: float = float(os.getenv("MAX_STORAGE_TEMP", "8"))
    max_ml_per_kg: int = int(os.getenv("MAX_ML_PER_KG", "9"))

    # "fifo" (creation order) or "expiry" (soonest expiry first)
    allocation_policy: str = os.getenv("ALLOCATION_POLICY", "fifo").strip().lower()

    # Verify the inventory cache against the unit store after every mutation
    strict_invariants: bool = os.getenv("STRICT_INVARIANTS", "False").lower() == "true"

    ledger_state_file: str = os.getenv("LEDGER_STATE_FILE", "")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
