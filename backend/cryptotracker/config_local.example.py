"""
Local configuration example for the backend.
Copy this file as `cryptotracker/config_local.py` and keep it out of git.
Anything not set here is read from the environment.
"""

# CoinMarketCap API
# Paste your key on the server only; do not commit.
CMC_API_KEY = "PASTE_YOUR_KEY_HERE"

# Security
SESSION_SECRET = "CHANGE_ME_RANDOM_SECRET_FOR_SIGNING"  # keep only on the server
ALLOW_INSECURE_DEV_SECRET = False

# Database (SQLite file)
DATABASE_FILE = "./database.sqlite"

# Server
PORT = 5000
