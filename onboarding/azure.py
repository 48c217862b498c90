"""Anbindung an Azure: Verzeichnisabfrage und Rollenzuweisung.

Standardmäßig wird die Azure CLI (``az``) verwendet. Alternativ können die
Zuweisungen über die Pulumi Automation API als ``RoleAssignment``-Ressourcen
eines Stacks verwaltet werden.
"""
import json
import logging
import subprocess
import uuid

import pulumi
from pulumi import automation as auto
from pulumi_azure_native import authorization

from onboarding.errors import RoleAssignmentFailed, UnknownPrincipal

logger = logging.getLogger(__name__)

# Fehler beim Anlegen oder Aktualisieren des Stacks, z. B. fehlendes pulumi-Binary
STACK_ERRORS = (auto.CommandError, auto.errors.InvalidVersionError, OSError)


def run_az(args: list) -> str:
    cmd = ["az", *args]
    try:
        result = subprocess.run(
            cmd,
            capture_output=True, text=True, check=True
        )
    except FileNotFoundError as e:
        # Azure CLI nicht installiert: wie ein fehlgeschlagener Aufruf behandeln
        raise subprocess.CalledProcessError(127, cmd, stderr=f"Azure CLI nicht verfügbar: {e}") from e
    return result.stdout.strip()


def error_detail(error: subprocess.CalledProcessError) -> str:
    return (error.stderr or error.stdout or str(error)).strip()


class AzCliDirectory:
    """Löst Benutzerprinzipalnamen über ``az ad user show`` auf."""

    def resolve_principal(self, name: str) -> str:
        try:
            object_id = run_az(["ad", "user", "show", "--id", name, "--query", "id", "-o", "tsv"])
        except subprocess.CalledProcessError as e:
            raise UnknownPrincipal(name, error_detail(e)) from e
        if not object_id:
            raise UnknownPrincipal(name)
        return object_id


class CachedDirectory:
    """Merkt sich das Ergebnis der Auflösung (auch Fehler) pro Name."""

    def __init__(self, directory):
        self.directory = directory
        self._results = {}

    def resolve_principal(self, name: str) -> str:
        if name not in self._results:
            try:
                self._results[name] = self.directory.resolve_principal(name)
            except UnknownPrincipal as e:
                self._results[name] = e
        result = self._results[name]
        if isinstance(result, UnknownPrincipal):
            raise result
        return result


class AzCliRoleAssigner:
    """Legt Rollenzuweisungen mit ``az role assignment create`` an."""

    def __init__(self, principal_type: str = "User"):
        self.principal_type = principal_type

    def assign_role(self, principal_id: str, role: str, scope: str) -> str:
        try:
            output = run_az([
                "role", "assignment", "create",
                "--assignee-object-id", principal_id,
                "--assignee-principal-type", self.principal_type,
                "--role", role,
                "--scope", scope,
                "-o", "json",
            ])
        except subprocess.CalledProcessError as e:
            raise RoleAssignmentFailed(error_detail(e)) from e

        try:
            assignment = json.loads(output) if output else {}
        except json.JSONDecodeError:
            return output
        if assignment.get("name"):
            return f"Rollenzuweisung {assignment['name']} angelegt"
        return "Rollenzuweisung angelegt"


class DryRunRoleAssigner:
    """Führt keine Zuweisung durch, sondern protokolliert sie nur."""

    def assign_role(self, principal_id: str, role: str, scope: str) -> str:
        logger.info(f"[Dry Run] Würde Rolle '{role}' für {principal_id} auf {scope} zuweisen")
        return "Dry Run: Rollenzuweisung nicht angelegt"


def get_role_definition_id(role_name: str, scope: str) -> str:
    return run_az([
        "role", "definition", "list", "--name", role_name,
        "--scope", scope, "--query", "[0].id", "-o", "tsv",
    ])


def role_assignment_name(principal_id: str, role: str, scope: str) -> str:
    # Deterministischer Name, damit erneute Läufe dieselbe Ressource treffen
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{principal_id}|{role}|{scope}"))


def declare_assignments(grants: list) -> list:
    """Deklariert je Eintrag eine ``RoleAssignment``-Ressource.

    Jeder Eintrag ist ein Dict mit ``principal_id``, ``role_definition_id``,
    ``scope`` und ``name``.

    Die Zuweisungen bleiben in Azure bestehen, wenn sie aus dem Programm
    verschwinden (``retain_on_delete``); der Stack entzieht keine Rechte.
    """
    assignments = []
    for grant in grants:
        assignments.append(authorization.RoleAssignment(
            f"roleAssignment-{grant['name']}",
            principal_id=grant["principal_id"],
            principal_type=grant.get("principal_type", "User"),
            role_definition_id=grant["role_definition_id"],
            scope=grant["scope"],
            role_assignment_name=grant["name"],
            opts=pulumi.ResourceOptions(retain_on_delete=True),
        ))
    return assignments


class PulumiRoleAssigner:
    """Verwaltet die Zuweisungen als Ressourcen eines Pulumi-Stacks.

    Jeder Aufruf führt ein ``stack.up()`` mit allen bisher erfolgreichen
    Zuweisungen plus der neuen aus. Schlägt das Update fehl, wird die neue
    Zuweisung wieder aus dem Programm entfernt.
    """

    def __init__(self, project_name: str, stack_name: str, principal_type: str = "User"):
        self.project_name = project_name
        self.stack_name = stack_name
        self.principal_type = principal_type
        self.grants = []
        self._stack = None

    def program(self):
        assignments = declare_assignments(self.grants)
        pulumi.export("role_assignments", [assignment.id for assignment in assignments])

    def stack(self):
        if self._stack is None:
            self._stack = auto.create_or_select_stack(
                stack_name=self.stack_name,
                project_name=self.project_name,
                program=self.program,
            )
        return self._stack

    def assign_role(self, principal_id: str, role: str, scope: str) -> str:
        try:
            role_definition_id = get_role_definition_id(role, scope)
        except subprocess.CalledProcessError as e:
            raise RoleAssignmentFailed(error_detail(e)) from e
        if not role_definition_id:
            raise RoleAssignmentFailed(f"Rollendefinition nicht gefunden: {role}")

        grant = {
            "name": role_assignment_name(principal_id, role, scope),
            "principal_id": principal_id,
            "principal_type": self.principal_type,
            "role_definition_id": role_definition_id,
            "scope": scope,
        }
        if grant in self.grants:
            return f"Rollenzuweisung {grant['name']} in diesem Lauf bereits angewendet"

        self.grants.append(grant)
        try:
            result = self.stack().up(on_output=logger.debug)
        except STACK_ERRORS as e:
            self.grants.remove(grant)
            raise RoleAssignmentFailed(str(e)) from e

        return f"Rollenzuweisung {grant['name']} angewendet ({result.summary.result})"
