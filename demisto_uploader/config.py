"""
Configuration constants for the Demisto uploader.
"""

# --- Hashing ---
HASH_CHUNK_SIZE = 64 * 1024  # 64 KB chunks for reading

# Larger files keep an empty fuzzy hash; ppdeep hashes an in-memory buffer
FUZZY_HASH_MAX_SIZE = 64 * 1024 * 1024  # 64 MB

# Exact digests computed in a single pass, in this order
DIGEST_ALGORITHMS = ("md5", "sha1", "sha256", "sha512")

# --- Records ---
FOLDER_TYPE = "Folder"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %z"

# --- Upload ---
# Display format of every entry added to an investigation
ENTRY_FORMAT = "table"

# Defaults for the incident opened per top-level directory
INCIDENT_TYPE = "Malware"
INCIDENT_STATUS = 0
INCIDENT_LEVEL = 1
INCIDENT_TARGET_TYPE = "Host"

REQUEST_TIMEOUT = 30  # seconds

# Environment fallbacks for credentials
ENV_USERNAME = "DEMISTO_USERNAME"
ENV_PASSWORD = "DEMISTO_PASSWORD"
ENV_SERVER = "DEMISTO_SERVER"
