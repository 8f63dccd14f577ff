import uuid
from datetime import date, datetime
from zoneinfo import ZoneInfo
from .config import settings

def tenant_today(org_id: uuid.UUID | None = None) -> date:
    """Current calendar date in the org's configured timezone."""
    return datetime.now(ZoneInfo(settings.timezone_for(org_id))).date()
