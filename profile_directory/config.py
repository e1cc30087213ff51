"""
Centralized configuration: env vars, storage settings, import policy.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── PostgreSQL ────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')

# ── Auth ─────────────────────────────────────────────────────────────────────
SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-change-me')
ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD')

# ── Uploads ──────────────────────────────────────────────────────────────────
MAX_UPLOAD_MB = int(os.getenv('MAX_UPLOAD_MB', '50'))

# ── Storage ──────────────────────────────────────────────────────────────────
# "local" keeps media on disk under STORAGE_LOCAL_ROOT, "r2" uses an
# S3-compatible bucket through a pooled boto3 client.
STORAGE_BACKEND = os.getenv('STORAGE_BACKEND', 'local')
STORAGE_LOCAL_ROOT = os.getenv('STORAGE_LOCAL_ROOT', 'fileBase')
STORAGE_PUBLIC_PREFIX = os.getenv('STORAGE_PUBLIC_PREFIX', '/fileBase')
FILE_SERVER_URL = os.getenv('FILE_SERVER_URL', 'https://files.yourdomain.com')
STORAGE_POOL_SIZE = int(os.getenv('STORAGE_POOL_SIZE', '3'))
STORAGE_POOL_TIMEOUT = float(os.getenv('STORAGE_POOL_TIMEOUT', '5'))

# ── Cloudflare R2 ─────────────────────────────────────────────────────────────
R2_ACCESS_KEY_ID = os.getenv('R2_ACCESS_KEY_ID')
R2_SECRET_ACCESS_KEY = os.getenv('R2_SECRET_ACCESS_KEY')
R2_BUCKET_NAME = os.getenv('R2_BUCKET_NAME')
R2_ENDPOINT_URL = os.getenv('R2_ENDPOINT_URL')
R2_PUBLIC_URL = os.getenv('R2_PUBLIC_URL')

# ── Import pipeline ──────────────────────────────────────────────────────────
IMPORT_PRIMARY_ENCODING = os.getenv('IMPORT_PRIMARY_ENCODING', 'utf-8')
IMPORT_FALLBACK_ENCODING = os.getenv('IMPORT_FALLBACK_ENCODING', 'cp1251')

# What an account gets as date_of_create when the dump has no <date> tag:
#   "null": hidden until a moderator sets a date
#   "now":  published immediately with today's date
# An explicitly empty <date></date> is always null.
IMPORT_MISSING_DATE_POLICY = os.getenv('IMPORT_MISSING_DATE_POLICY', 'null')

# ── Social network types: dump tag → display name ────────────────────────────
# Order is the order links are attached during import.
SOCIAL_TYPES = {
    'fb':    'Facebook',
    'od':    'Odnoklassniki',
    'icq':   'ICQ',
    'insta': 'Instagram',
    'tw':    'Twitter',
    'email': 'Email',
    'tg':    'Telegram',
    'tik':   'TikTok',
    'of':    'OnlyFans',
    'tel':   'Telephone',
    'skype': 'Skype',
    'vk':    'VK',
}

# ── Media ────────────────────────────────────────────────────────────────────
IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif')
VIDEO_EXTENSIONS = ('.mp4', '.mov', '.avi', '.mkv')
VIDEO_NUMBER_START = 200

# ── Site pages ───────────────────────────────────────────────────────────────
# Storage folder holding one sub-folder of images per editable page
PAGES_STORAGE_DIR = os.getenv('PAGES_STORAGE_DIR', '_pages')
