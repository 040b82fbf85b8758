"""
Conduit UI constants: routes and selectors shared by page objects and tests.
"""

DEFAULT_BASE_URL = "https://conduit.bondaracademy.com"
DEFAULT_API_BASE_URL = f"{DEFAULT_BASE_URL}/api"

LOGIN_PATH = "/login"
REGISTER_PATH = "/register"
SETTINGS_PATH = "/settings"
EDITOR_PATH = "/editor"

# Local/session storage keys the Angular client reads on boot
TOKEN_STORAGE_KEY = "token"
USER_STORAGE_KEY = "user"

# Logged-in markers
PROFILE_LINK = 'a[href*="/profile/"]'
SETTINGS_LINK = 'a[href*="/settings"]'
NEW_ARTICLE_LINK = 'a[href*="/editor"]'
AUTHENTICATED_MARKERS = (PROFILE_LINK, SETTINGS_LINK, NEW_ARTICLE_LINK)

# Anonymous-only marker
SIGN_IN_LINK = 'a[href="/login"]'

ERROR_BANNER = ".error-messages"

# Home feed
ARTICLE_PREVIEW = ".article-preview"
ARTICLE_PREVIEW_TITLE = ".article-preview h1"
TAG_PILL = ".tag-pill"
POPULAR_TAGS = ".sidebar .tag-list .tag-pill"
ACTIVE_TAG = ".feed-toggle .nav-link.active"

# Login / signup forms
EMAIL_INPUT = 'input[formcontrolname="email"], input[type="email"], input[placeholder="Email"]'
PASSWORD_INPUT = 'input[formcontrolname="password"], input[type="password"]'
USERNAME_INPUT = 'input[formcontrolname="username"], input[placeholder*="Username"]'
SIGN_IN_BUTTON = 'button:has-text("Sign in")'
SIGN_UP_BUTTON = 'button:has-text("Sign up")'

# Article editor
TITLE_INPUT = 'input[formcontrolname="title"], input[placeholder*="Article Title"]'
DESCRIPTION_INPUT = (
    "input[formcontrolname=\"description\"], input[placeholder*=\"What's this article about?\"]"
)
BODY_INPUT = 'textarea[formcontrolname="body"], textarea[placeholder*="Write your article"]'
TAGS_INPUT = 'input[placeholder*="Enter tags"], input[formcontrolname="tagList"]'
PUBLISH_BUTTON = 'button:has-text("Publish Article")'
EDITOR_TAG_REMOVE = ".tag-list .tag-pill .ion-close-round"

# Article view
EDIT_ARTICLE_BUTTON = 'a:has-text("Edit Article"), button:has-text("Edit Article")'
DELETE_ARTICLE_BUTTON = 'button:has-text("Delete Article")'
ARTICLE_TITLE = ".banner h1"
ARTICLE_BODY = ".article-content"
ARTICLE_TAGS = ".article-content .tag-list .tag-pill, .tag-list .tag-default"
ARTICLE_AUTHOR = ".article-meta .author"

# Settings
IMAGE_INPUT = 'input[formcontrolname="image"], input[placeholder*="URL of profile picture"]'
SETTINGS_USERNAME_INPUT = 'input[formcontrolname="username"], input[placeholder*="Your username"]'
BIO_INPUT = 'textarea[formcontrolname="bio"], textarea[placeholder*="Short bio"]'
UPDATE_SETTINGS_BUTTON = 'button:has-text("Update Settings")'
LOGOUT_BUTTON = 'button:has-text("Or click here to logout")'
