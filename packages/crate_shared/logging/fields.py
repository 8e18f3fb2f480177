"""Canonical logging field names for evaluation logs.

Keeping names centralized keeps structured log output stable between the
core, the validation script, and any orchestrator consuming the logs.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"

# Evaluation fields.
SYSTEM = "system"
PROJECT = "project"
PLATFORM = "platform"
STAGE = "stage"
PATH = "path"
TARGET_COUNT = "target_count"

# Emitted as first-class record fields, in this order.
EVALUATION_FIELDS = (SYSTEM, PROJECT, PLATFORM, STAGE, EVENT)

# Event names.
PROJECT_DECLARED_EVENT = "project_declared"
TARGET_ADDED_EVENT = "target_added"
CRATE_REGISTERED_EVENT = "crate_registered"
CRATE_REGISTRATION_UNCHANGED_EVENT = "crate_registration_unchanged"
EVALUATION_COMPLETED_EVENT = "evaluation_completed"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
