#!/usr/bin/env python3
import os
import sys
import time
import subprocess

UVICORN_CMD = os.environ.get("UVICORN_CMD", "uvicorn main:app --host 0.0.0.0 --port 8080")
MIGRATE = os.environ.get("RUN_MIGRATIONS", "1").strip() not in ("0", "false", "no")


def migrate(max_retries=3):
    for attempt in range(1, max_retries + 1):
        result = subprocess.run(["alembic", "upgrade", "head"])
        if result.returncode == 0:
            return True
        print(f"[prestart] migration attempt {attempt} failed (exit {result.returncode})", file=sys.stderr)
        time.sleep(2 * attempt)
    return False


if MIGRATE:
    print("[prestart] Running database migrations ...")
    if not migrate():
        print("[prestart] Failed to migrate database. Exiting.", file=sys.stderr)
        sys.exit(1)
else:
    print("[prestart] RUN_MIGRATIONS disabled; skipping migrations.")

# Exec uvicorn (replace this process)
args = UVICORN_CMD.split()
print(f"[prestart] Exec: {args}")
os.execvp(args[0], args)
