from enum import Enum
from sqlalchemy import Enum as SAEnum

# =============== Users Tabel usage ===============
class Role(str, Enum):
    user = "user"
    trial = "trial"

RoleEnum = SAEnum(Role, name="role_enum")

# =============== Events Tabel usage ===============
class Category(str, Enum):
    work = "work"
    personal = "personal"
    meeting = "meeting"

class Priority(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"

CategoryEnum = SAEnum(Category, name="event_category_enum")
PriorityEnum = SAEnum(Priority, name="event_priority_enum")
