"""Django test settings for ÉgliseConnect Finance."""
import os

os.environ.setdefault('SECRET_KEY', 'django-insecure-test-only-key')

from .base import *  # noqa: F401, F403

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']


DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    'DEFAULT_THROTTLE_CLASSES': [],
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

# Collaborators are mocked in tests
SUPABASE_URL = ''
SUPABASE_SERVICE_KEY = ''
STRIPE_SECRET_KEY = ''
STRIPE_WEBHOOK_SECRET = ''

DONATION_EDIT_WINDOW_MINUTES = 24 * 60
EXPENSE_EDIT_WINDOW_MINUTES = 24 * 60
RECEIPT_SIGNED_URL_TTL_SECONDS = 900
RECEIPT_LINK_SAFETY_MARGIN_SECONDS = 60
