# settings.py
from constantStorage.ascii_constants import *

# -------------------------
# Logging
# -------------------------
LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
