import logging
import re
import uuid
from dataclasses import dataclass, field

from onboarding.azure import CachedDirectory
from onboarding.errors import InvalidJob, MalformedRow
from onboarding.executor import GrantOutcome, GrantStatus, execute_grant, failed
from onboarding.manifest import load_manifest

logger = logging.getLogger(__name__)

SUBSCRIPTION_ID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


@dataclass(frozen=True)
class OnboardingJob:
    user_principal_name: str
    position: str
    client: str
    subscription_id: str
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class RunReport:
    job: OnboardingJob
    outcomes: list = field(default_factory=list)

    @property
    def granted(self) -> int:
        return sum(1 for o in self.outcomes if o.status is GrantStatus.GRANTED)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.status is GrantStatus.FAILED)

    @property
    def succeeded(self) -> bool:
        return self.failed == 0


def validate_job(job: OnboardingJob) -> None:
    missing = [
        name for name in ("user_principal_name", "position", "client", "subscription_id")
        if not (getattr(job, name) or "").strip()
    ]
    if missing:
        raise InvalidJob(f"Fehlende Auftragsparameter: {', '.join(missing)}")
    if not SUBSCRIPTION_ID_PATTERN.match(job.subscription_id):
        raise InvalidJob(f"Ungültige Subscription-ID: {job.subscription_id!r}")


def run_onboarding(job: OnboardingJob, manifest_root, directory, assigner,
                   cache_principal: bool = True) -> RunReport:
    """Wendet das Manifest für ``job`` vollständig an.

    Bricht nur bei ``InvalidJob`` oder ``ManifestNotFound`` ab. Jede Zeile
    liefert genau ein Ergebnis, in der Reihenfolge des Manifests.
    """
    validate_job(job)
    entries = load_manifest(job.client, job.position, manifest_root)

    if cache_principal:
        # Identität nur einmal pro Lauf auflösen
        directory = CachedDirectory(directory)

    logger.info(
        f"Starte Onboarding {job.job_id} für {job.user_principal_name} "
        f"({job.client}/{job.position}), {len(entries)} Zeile(n)"
    )
    report = RunReport(job=job)
    for entry in entries:
        if isinstance(entry, MalformedRow):
            outcome = failed(entry.request, entry, job_id=job.job_id)
        else:
            outcome = execute_grant(
                entry, job.user_principal_name, job.subscription_id,
                directory, assigner, job_id=job.job_id,
            )
        report.outcomes.append(outcome)

    logger.info(f"Onboarding {job.job_id} abgeschlossen: Granted={report.granted}, Failed={report.failed}")
    return report
