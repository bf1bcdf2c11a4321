"""
Django settings for kickbooking.

Values are read from the environment; a ``.env`` file at the project root is
loaded first when present.
"""
import os
import warnings
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(dotenv_path=BASE_DIR / ".env")


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    warnings.warn("SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2)
    SECRET_KEY = "insecure-dev-key-change-in-production"  # noqa: S105 - dev fallback only

DEBUG = env_bool("DEBUG", True)

ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'booking',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'kickbooking.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'kickbooking.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv("SQLITE_PATH", str(BASE_DIR / "db.sqlite3")),
        # BEGIN IMMEDIATE takes the write lock up front, so booking checks
        # for one stadium run one at a time; waiters block up to `timeout`.
        'OPTIONS': {
            'transaction_mode': 'IMMEDIATE',
            'timeout': float(os.getenv("SQLITE_TIMEOUT", "20")),
        },
        # a file, not shared-cache memory, so concurrent test connections wait on the lock
        'TEST': {'NAME': os.getenv("SQLITE_TEST_PATH", str(BASE_DIR / "test_db.sqlite3"))},
    }
}

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.getenv("TIME_ZONE", "Africa/Accra")
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
MEDIA_URL = '/media/'
MEDIA_ROOT = Path(os.getenv("MEDIA_ROOT", str(BASE_DIR / "media")))

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LOGIN_URL = 'login'
LOGIN_REDIRECT_URL = 'user-dashboard'
LOGOUT_REDIRECT_URL = 'home'

# Bookings
BOOKING_CURRENCY = os.getenv("BOOKING_CURRENCY", "GHS")
DEFAULT_STADIUM_IMAGE = os.getenv("DEFAULT_STADIUM_IMAGE", "/placeholder.jpg")

# ExpressPay gateway
EXPRESSPAY_API_URL = os.getenv("EXPRESSPAY_API_URL", "https://sandbox.expresspaygh.com/api")
EXPRESSPAY_MERCHANT_ID = os.getenv("EXPRESSPAY_MERCHANT_ID", "demo")
EXPRESSPAY_API_KEY = os.getenv("EXPRESSPAY_API_KEY", "demo")
EXPRESSPAY_REDIRECT_URL = os.getenv("EXPRESSPAY_REDIRECT_URL", "http://localhost:8000/thankyou/")
EXPRESSPAY_CANCEL_URL = os.getenv("EXPRESSPAY_CANCEL_URL", "http://localhost:8000/user/my-bookings/")
EXPRESSPAY_TIMEOUT = float(os.getenv("EXPRESSPAY_TIMEOUT", "15"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'booking': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
    },
}
