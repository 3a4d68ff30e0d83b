import json, sys, time

from backend.core.settings import settings

LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "WARNING": 30, "ERROR": 40}

def _enabled(level: str) -> bool:
    threshold = LEVELS.get(settings.LOG_LEVEL.upper(), 20)
    return LEVELS.get(level.upper(), 20) >= threshold

def log_event(agent:str, level:str, message:str, meta:dict|None=None):
    if not _enabled(level):
        return
    rec = {
        "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "agent": agent,
        "level": level,
        "message": message,
        "meta": meta or {}
    }
    sys.stdout.write(json.dumps(rec, ensure_ascii=False, default=str) + "\n")
    sys.stdout.flush()
