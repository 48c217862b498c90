"""Fehlerklassen für den Onboarding-Lauf.

Nur ``InvalidJob``, ``InvalidSettings`` und ``ManifestNotFound`` brechen einen
Lauf ab; alle anderen Fehler landen als fehlgeschlagenes Ergebnis in der
jeweiligen Zeile.
"""


class OnboardingError(Exception):
    """Basisklasse aller Onboarding-Fehler."""


class InvalidJob(OnboardingError):
    pass


class InvalidSettings(OnboardingError):
    pass


class ManifestNotFound(OnboardingError):
    def __init__(self, path):
        super().__init__(f"Berechtigungsmanifest nicht gefunden: {path}")
        self.path = path


class MalformedRow(OnboardingError):
    def __init__(self, request, missing):
        super().__init__(
            f"Zeile {request.line}: Pflichtfeld(er) fehlen: {', '.join(missing)}"
        )
        self.request = request
        self.missing = missing


class UnknownPrincipal(OnboardingError):
    def __init__(self, name: str, detail: str = ""):
        message = f"Prinzipal konnte nicht aufgelöst werden: {name}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.name = name
        self.detail = detail


class UnknownResourceType(OnboardingError):
    def __init__(self, resource_type: str):
        super().__init__(f"Unbekannter Ressourcentyp: {resource_type!r}")
        self.resource_type = resource_type


class RoleAssignmentFailed(OnboardingError):
    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail
