import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

from onboarding.errors import InvalidSettings

BACKENDS = ("az", "pulumi", "dry-run")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    manifest_root: Path = Path("permissions")
    log_dir: Path = Path("logs")
    backend: str = "az"
    pulumi_project: str = "onboarding-grants"
    pulumi_stack: str = "dev"
    log_level: str = "INFO"

    def __post_init__(self):
        # Unbekanntes Backend darf nie auf echte Zuweisungen zurückfallen
        if self.backend not in BACKENDS:
            raise InvalidSettings(
                f"Unbekanntes Backend: {self.backend!r} (erlaubt: {', '.join(BACKENDS)})"
            )
        if self.log_level not in LOG_LEVELS:
            raise InvalidSettings(
                f"Unbekanntes Log-Level: {self.log_level!r} (erlaubt: {', '.join(LOG_LEVELS)})"
            )

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        environ = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            manifest_root=Path(environ.get("ONBOARDING_MANIFEST_ROOT") or defaults.manifest_root),
            log_dir=Path(environ.get("ONBOARDING_LOG_DIR") or defaults.log_dir),
            backend=environ.get("ONBOARDING_BACKEND") or defaults.backend,
            pulumi_project=environ.get("ONBOARDING_PULUMI_PROJECT") or defaults.pulumi_project,
            pulumi_stack=environ.get("ONBOARDING_PULUMI_STACK") or defaults.pulumi_stack,
            log_level=(environ.get("ONBOARDING_LOG_LEVEL") or defaults.log_level).upper(),
        )

    def override(self, **values) -> "Settings":
        # None bedeutet: Wert nicht auf der Kommandozeile gesetzt
        names = {f.name for f in fields(self)}
        return replace(self, **{k: v for k, v in values.items() if k in names and v is not None})
