"""
Default endpoints and limits for NoteSync.
"""

DEFAULT_AUTHORIZE_URL = "https://www.dropbox.com/oauth2/authorize"
DEFAULT_TOKEN_URL = "https://api.dropboxapi.com/oauth2/token"
DEFAULT_API_URL = "https://api.dropboxapi.com/2"
DEFAULT_CONTENT_URL = "https://content.dropboxapi.com/2"
DEFAULT_REDIRECT_URI = "http://localhost:5173/callback"

DEFAULT_DATA_DIR = "data"
DEFAULT_HTTP_TIMEOUT = 30.0

# Pending authorization flows are abandoned after 10 minutes
DEFAULT_FLOW_TTL_SECONDS = 600
