import os

from config.config import *  # noqa: F401,F403
from config.config import db_config

SECRET_KEY = "test-secret"

DB_CONFIG = db_config(default_password="12345")

MAIL_CONFIG = {}

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = False
AUTO_SEED_DB = False
