"""Endpoints and client identifiers of the SKPort / Gryphline APIs."""

ZONAI_URL = "https://zonai.skport.com"
OAUTH_URL = "https://as.gryphline.com"

BASIC_INFO_URL = f"{OAUTH_URL}/user/info/v1/basic"
OAUTH_GRANT_URL = f"{OAUTH_URL}/user/oauth2/v2/grant"
GENERATE_CRED_URL = f"{ZONAI_URL}/web/v1/user/auth/generate_cred_by_code"
REFRESH_URL = f"{ZONAI_URL}/web/v1/auth/refresh"

BINDING_PATH = "/api/v1/game/player/binding"
ATTENDANCE_PATH = "/web/v1/game/endfield/attendance"
BINDING_URL = ZONAI_URL + BINDING_PATH
ATTENDANCE_URL = ZONAI_URL + ATTENDANCE_PATH

APP_CODE = "6eb76d4e13aa36e6"
PLATFORM = "3"
VNAME = "1.0.0"
ENDFIELD_GAME_ID = "3"
ENDFIELD_APP_CODE = "endfield"

GAME_ORIGIN = "https://game.skport.com"
WEB_ORIGIN = "https://www.skport.com"
USER_AGENT = "Skport/0.7.0 (com.gryphline.skport; build:700089; Android 33; ) Okhttp/5.1.0"

DISCORD_WEBHOOK_PREFIX = "https://discord.com/api/webhooks/"
DISCORD_CONTENT_LIMIT = 2000
