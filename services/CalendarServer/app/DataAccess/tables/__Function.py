import uuid_utils as uuidu
import uuid
from datetime import datetime, timezone


def create_uuid7() -> uuid.UUID:
    """UUIDv7：依時間遞增，同一使用者的事件 id 也會保有建立順序"""
    uuid_util = uuidu.uuid7()
    return uuid.UUID(str(uuid_util))


def as_utc(dt: datetime | None) -> datetime | None:
    """資料庫取回的時間若是 naive（SQLite），視為 UTC"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
