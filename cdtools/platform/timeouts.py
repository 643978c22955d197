from __future__ import annotations

# Local git operations (branch, diff, add, commit, tag -l)
GIT_TIMEOUT_SECONDS = 30.0

# Network-bound git operations (pull, push)
GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

# gh API / pr operations
GH_TIMEOUT_SECONDS = 60.0

# Idempotent gh read retry policy
GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0
