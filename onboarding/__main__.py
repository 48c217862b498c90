"""Vergibt Azure-Rollen für einen neuen Benutzer anhand des Berechtigungsmanifests.

Usage:
  python -m onboarding --user-principal-name jane.doe@company.com --position Developer \
      --client ClientA --subscription-id 00000000-0000-0000-0000-000000000000

Exit-Status: 0 wenn alle Zeilen vergeben wurden, 1 bei mindestens einer
fehlgeschlagenen Zeile, 2 bei ungültigem Auftrag oder fehlendem Manifest.
"""
import argparse
import logging
from pathlib import Path

from onboarding.azure import AzCliDirectory, AzCliRoleAssigner, DryRunRoleAssigner, PulumiRoleAssigner
from onboarding.config import BACKENDS, LOG_LEVELS, Settings
from onboarding.errors import InvalidJob, InvalidSettings, ManifestNotFound
from onboarding.orchestrator import OnboardingJob, run_onboarding, validate_job
from onboarding.reporting import LOG_FORMAT, transcript, write_results

logger = logging.getLogger("onboarding")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="onboarding", description="Assign Azure roles from a permission manifest.")
    ap.add_argument("--user-principal-name", required=True)
    ap.add_argument("--position", required=True)
    ap.add_argument("--client", required=True)
    ap.add_argument("--subscription-id", required=True)
    ap.add_argument("--manifest-root", type=Path, help="Directory containing the *-Permissions.csv manifests")
    ap.add_argument("--log-dir", type=Path, help="Directory for the run transcript")
    ap.add_argument("--results-out", type=Path, help="Write a JSON results file")
    ap.add_argument("--backend", choices=BACKENDS)
    ap.add_argument("--dry-run", action="store_true", help="Shortcut for --backend dry-run")
    ap.add_argument("--pulumi-project")
    ap.add_argument("--pulumi-stack")
    ap.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS)
    return ap


def build_collaborators(settings: Settings):
    directory = AzCliDirectory()
    if settings.backend == "pulumi":
        assigner = PulumiRoleAssigner(settings.pulumi_project, settings.pulumi_stack)
    elif settings.backend == "dry-run":
        assigner = DryRunRoleAssigner()
    elif settings.backend == "az":
        assigner = AzCliRoleAssigner()
    else:
        raise InvalidSettings(f"Unbekanntes Backend: {settings.backend!r}")
    return directory, assigner


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(format=LOG_FORMAT)

    job = OnboardingJob(
        user_principal_name=args.user_principal_name,
        position=args.position,
        client=args.client,
        subscription_id=args.subscription_id,
    )
    try:
        settings = Settings.from_env().override(
            manifest_root=args.manifest_root,
            log_dir=args.log_dir,
            backend="dry-run" if args.dry_run else args.backend,
            pulumi_project=args.pulumi_project,
            pulumi_stack=args.pulumi_stack,
            log_level=args.log_level,
        )
        # Auftrag vor dem Transcript prüfen, der Dateiname hängt davon ab
        validate_job(job)
        directory, assigner = build_collaborators(settings)
    except (InvalidSettings, InvalidJob) as e:
        logger.error(f"Onboarding abgebrochen: {e}")
        return 2
    logger.setLevel(settings.log_level)

    manifest_root = settings.manifest_root.resolve()
    results_out = args.results_out.resolve() if args.results_out else None

    working_dir = manifest_root if manifest_root.is_dir() else None
    with transcript(settings.log_dir, job, working_dir=working_dir):
        try:
            report = run_onboarding(job, manifest_root, directory, assigner)
        except (InvalidJob, ManifestNotFound) as e:
            logger.error(f"Onboarding abgebrochen: {e}")
            return 2

        if results_out:
            write_results(results_out, report)

        print(f"Granted={report.granted}, Failed={report.failed}")
        for outcome in report.outcomes:
            if not outcome.granted:
                print(f"FEHLER: Zeile {outcome.request.line} {outcome.request.resource_type}/"
                      f"{outcome.request.resource_name} ({outcome.request.role}): {outcome.error}: {outcome.detail}")

    return 0 if report.succeeded else 1


if __name__ == "__main__":
    raise SystemExit(main())
