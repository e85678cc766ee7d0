"""
Configuration constants for the incremental formatter.
"""

# --- File Selection ---
# Pipe separated, the same shape build systems pass on the command line
DEFAULT_EXTENSIONS = ".cpp|.c|.h|.hpp|.inl"

# --- Formatter Invocation ---
DEFAULT_FORMATTER = "clang-format"
IN_PLACE_FLAG = "-i"
STYLE_FILE_ARG = "-style=file:{}"
VERSION_FLAG = "--version"

# Concurrency directive meaning "one worker per logical processor"
AUTO_PROCESSES = "auto"
DEFAULT_MAX_PROCESSES = "1"

# --- Stamps (Fingerprint Records) ---
STAMP_EXTENSION = ".stamp"
STAMP_DIR_NAME = ".format-stamps"

# --- Hashing ---
HASH_CHUNK_SIZE = 64 * 1024  # 64 KB chunks for reading

# --- Logging ---
LOG_FILE_NAME = "incremental_format.log"
