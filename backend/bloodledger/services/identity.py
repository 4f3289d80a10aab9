from typing import Optional

from .errors import ValidationError


def normalize_donor_id(raw: Optional[str]) -> str:
    """Ingestion boundary for donor identities: stripped and non-empty."""
    donor_id = (raw or "").strip()
    if not donor_id:
        raise ValidationError("donor_id_required", "Donor id is required")
    return donor_id


def require_volume(volume, label: str = "Volume") -> int:
    """Volumes are whole millilitres: a real int, never bool or float."""
    if isinstance(volume, bool) or not isinstance(volume, int):
        raise ValidationError("volume_integer", f"{label} must be a whole number of ml")
    if volume <= 0:
        raise ValidationError("volume_positive", f"{label} must be positive")
    return volume
