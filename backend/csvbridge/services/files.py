from pathlib import Path
from csvbridge.core.config import settings
from csvbridge.services.etl.utils import text_sha256

def ensure_dirs():
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)

def upload_path(user_id: int, digest: str) -> Path:
    return Path(settings.UPLOAD_DIR) / f"{user_id}_{digest}.csv"

def store_csv_text(user_id: int, content: str) -> Path:
    """Store decoded CSV text once per user and content hash."""
    ensure_dirs()
    dest = upload_path(user_id, text_sha256(content))
    if not dest.exists():
        dest.write_text(content, encoding="utf-8")
    return dest
