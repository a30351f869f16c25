API_VERSION_HEADER = "X-Tree-Carbon-Version"

# Validation harness
DEFAULT_VALIDATION_TRIALS = 20
MAX_VALIDATION_TRIALS = 1000
