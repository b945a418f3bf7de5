"""
Configuration constants for the chart-of-accounts client.
"""

import os

# Accounts API endpoint
ACCOUNTS_API_URL = os.environ.get("ACCOUNTS_API_URL", "http://localhost:5000/api/accounts")
ACCOUNTS_API_TIMEOUT = float(os.environ.get("ACCOUNTS_API_TIMEOUT", "30"))  # Seconds per request

# Operation codes understood by the API (shared convention across all modules)
OPERATION_LIST = 1
OPERATION_CREATE = 2
OPERATION_UPDATE = 3
OPERATION_DELETE = 4

# Tree building
MAX_TREE_DEPTH = int(os.environ.get("MAX_TREE_DEPTH", "64"))  # Deeper subtrees are cut off with a warning

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Account code numbering used by the mock API
ACCOUNT_TYPE_PREFIX = {
    "ASSET": "1",
    "LIABILITY": "2",
    "EQUITY": "3",
    "REVENUE": "4",
    "EXPENSE": "5",
}
