"""Test settings for the hotel booking project.

Used by pytest (see ``[tool.pytest.ini_options]`` in pyproject.toml): an
in-memory SQLite database, eager Celery tasks, in-memory e-mail and a fast
password hasher.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

# Payment provider is always emulated in tests
PAYMENT_PROVIDER_API_KEY = ''
PAYMENT_WEBHOOK_SECRET = ''

LOGGING['root']['level'] = 'CRITICAL'  # noqa: F405
LOGGING['handlers']['console']['level'] = 'CRITICAL'  # noqa: F405
