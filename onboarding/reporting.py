import contextlib
import json
import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def now_utc() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def safe_name(value: str) -> str:
    # Nur Zeichen, die als Dateiname unter log_dir bleiben
    return re.sub(r"[^A-Za-z0-9._-]", "_", value.strip()).strip(".") or "_"


def transcript_path(log_dir, job) -> Path:
    return Path(log_dir) / f"{safe_name(job.client)}-{safe_name(job.position)}-{job.job_id}.log"


@contextlib.contextmanager
def transcript(log_dir, job, working_dir=None):
    """Schreibt alle Log-Ausgaben des Laufs zusätzlich in eine Datei.

    Optional wird für die Dauer des Laufs in ``working_dir`` gewechselt.
    Handler und Arbeitsverzeichnis werden auf jedem Weg wieder freigegeben.
    """
    path = transcript_path(log_dir, job).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.addHandler(handler)
    previous_dir = os.getcwd()
    try:
        if working_dir is not None:
            os.chdir(working_dir)
        logger.info(f"Transcript gestartet: {path}")
        yield path
    finally:
        os.chdir(previous_dir)
        logger.info(f"Transcript beendet: {path}")
        root.removeHandler(handler)
        handler.close()


def summary(report) -> dict:
    return {"granted": report.granted, "failed": report.failed}


def write_results(out_path, report) -> None:
    job = report.job
    payload = {
        "timestamp": now_utc(),
        "job": {
            "job_id": job.job_id,
            "user_principal_name": job.user_principal_name,
            "position": job.position,
            "client": job.client,
            "subscription_id": job.subscription_id,
        },
        "results": [outcome.as_record() for outcome in report.outcomes],
        "summary": summary(report),
    }
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    logger.info(f"Ergebnisse geschrieben: {out_path}")
