# prefix
API_ROOT = "/api/v1"
AUTH_PREFIX = "/auth"
USER_PREFIX = "/users"
EVENTS_PREFIX = "/events"
CALENDAR_PREFIX = "/calendar"
DIARY_PREFIX = "/diary"

# ========== routers method path ==========
#{router name}_{HTTP method}_{function name}

# router.Authentication
AUTH_POST_REGISTER = "/register"
AUTH_POST_LOGIN = "/login"
AUTH_POST_LOGOUT = "/logout"
AUTH_POST_TRIAL = "/trial"
AUTH_GET_ME = "/me"

# router.User
USER_PATCH_PROFILE = "/profile"
USER_GET_PREFERENCES = "/preferences"
USER_PATCH_PREFERENCES = "/preferences"
USER_GET_TIMEZONES = "/preferences/timezones"

# router.Events
EVENTS_GET_LIST = ""
EVENTS_POST_CREATE = ""
EVENTS_GET_ONE = "/{event_id}"
EVENTS_PUT_REPLACE = "/{event_id}"
EVENTS_PATCH_UPDATE = "/{event_id}"
EVENTS_DELETE_ONE = "/{event_id}"

# router.Calendar
CALENDAR_GET_MONTH = "/month"
CALENDAR_GET_DAY = "/day"

# router.Diary
DIARY_POST_GENERATE = "/generate"
DIARY_GET_EXPORT = "/export"
DIARY_POST_SAVE = ""
DIARY_GET_ONE = ""
