"""Development settings for the hotel booking project.

Debug on, console e-mail, Celery tasks run in-process and human readable
log lines. The payment provider is emulated while DEBUG is on (see
``apps.finances.gateway``). Do not use these settings in production!
"""

from .base import *  # noqa: F401,F403

DEBUG = True

ALLOWED_HOSTS = ['*']

CORS_ALLOW_ALL_ORIGINS = True

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# No broker needed locally
CELERY_TASK_ALWAYS_EAGER = os.environ.get('CELERY_TASK_ALWAYS_EAGER', 'true').lower() == 'true'  # noqa: F405

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

LOGGING['formatters']['console'] = {  # noqa: F405
    '()': 'structlog.stdlib.ProcessorFormatter',
    'processor': structlog.dev.ConsoleRenderer(),  # noqa: F405
    'foreign_pre_chain': LOGGING['formatters']['json']['foreign_pre_chain'],  # noqa: F405
}
LOGGING['handlers']['console']['formatter'] = 'console'  # noqa: F405
LOGGING['loggers']['apps']['level'] = 'DEBUG'  # noqa: F405
