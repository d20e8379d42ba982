"""Django development settings for ÉgliseConnect Finance."""
import os

# Dev-only fallback SECRET_KEY; production must set this explicitly in environment
os.environ.setdefault('SECRET_KEY', 'django-insecure-dev-only-key-do-not-use-in-production')

from .base import *  # noqa: F401, F403

DEBUG = True

ALLOWED_HOSTS = ['localhost', '127.0.0.1', '[::1]']


DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',  # noqa: F405
    }
}


EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'


CORS_ALLOW_ALL_ORIGINS = True


# Short windows so locking can be tried by hand
DONATION_EDIT_WINDOW_MINUTES = env.int('DONATION_EDIT_WINDOW_MINUTES', default=15)  # noqa: F405
EXPENSE_EDIT_WINDOW_MINUTES = env.int('EXPENSE_EDIT_WINDOW_MINUTES', default=15)  # noqa: F405

# Receipts land in a separate prefix of the dev bucket
CHURCH_STORAGE_PREFIX = env('CHURCH_STORAGE_PREFIX', default='dev')  # noqa: F405
RECEIPT_SIGNED_URL_TTL_SECONDS = env.int('RECEIPT_SIGNED_URL_TTL_SECONDS', default=300)  # noqa: F405


LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'apps': {
            'handlers': ['console'],
            'level': 'DEBUG',
            'propagate': False,
        },
    },
}
