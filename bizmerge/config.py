# bizmerge/config.py
from dotenv import load_dotenv
import os

load_dotenv()

# Match weights
EXACT_NAME_WEIGHT = 0.4
FUZZY_NAME_WEIGHT = 0.3
ADDRESS_WEIGHT = 0.3
PHONE_WEIGHT = 0.3
WEBSITE_WEIGHT = 0.4

# Thresholds (all compared with strict ">")
FUZZY_NAME_THRESHOLD = 0.8
ADDRESS_THRESHOLD = 0.7
MATCH_THRESHOLD = 0.7

# Decimal places kept when accumulating rule contributions
SCORE_PRECISION = 9

# Runtime parameters
BLOCKING_PREFIX_LENGTH = int(os.getenv("BLOCKING_PREFIX_LENGTH", "0"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# File names
INPUT_JSON = os.getenv("INPUT_JSON", "businesses.json")
OUTPUT_JSON = os.getenv("OUTPUT_JSON", "businesses_merged.json")
SUMMARY_JSON = os.getenv("SUMMARY_JSON", "deduplication_summary.json")
