import os

from config.base import *  # noqa: F401,F403
from config.base import env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
ENABLE_SCHEDULER = env_flag("ENABLE_SCHEDULER", "1")
