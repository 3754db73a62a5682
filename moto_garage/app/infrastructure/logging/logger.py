import json
import logging
from datetime import datetime, timezone

QUIET_OUTCOMES = frozenset({"success", "skipped", "stale", "declined"})
REDACTED_KEYS = frozenset({"access_token", "token", "authorization", "email", "phone", "contact"})


def get_logger(name: str, level: str | int = logging.INFO) -> logging.Logger:
    """Logger that prints bare messages; handlers are only attached once."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger


def log_action(
    logger: logging.Logger,
    module: str,
    action: str,
    actor_role: str | None,
    user_id: str | None,
    target_id: str | None,
    trace_id: str | None,
    outcome: str,
    **extra: object,
) -> None:
    level = logging.INFO if outcome in QUIET_OUTCOMES else logging.WARNING
    event = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "level": logging.getLevelName(level),
        "module": module,
        "action": action,
        "actor_role": actor_role,
        "user_id": user_id,
        "target_id": target_id,
        "trace_id": trace_id,
        "outcome": outcome,
    }
    event.update({key: value for key, value in extra.items() if key.lower() not in REDACTED_KEYS})
    logger.log(level, json.dumps(event, default=str))
