import pytest

from onboarding.errors import RoleAssignmentFailed, UnknownPrincipal

SUBSCRIPTION_ID = "00000000-0000-0000-0000-000000000000"
HEADER = "ResourceType,ResourceName,Role,ResourceGroupName\n"


class FakeDirectory:
    """Verzeichnis im Speicher, zählt die Abfragen."""

    def __init__(self, principals=None):
        self.principals = principals or {}
        self.calls = []

    def resolve_principal(self, name):
        self.calls.append(name)
        if name not in self.principals:
            raise UnknownPrincipal(name, "Resource does not exist")
        return self.principals[name]


class FakeAssigner:
    """Nimmt Zuweisungen entgegen; ``failures`` bildet Scope auf Fehlertext ab."""

    def __init__(self, failures=None):
        self.failures = failures or {}
        self.calls = []

    def assign_role(self, principal_id, role, scope):
        self.calls.append((principal_id, role, scope))
        if scope in self.failures:
            raise RoleAssignmentFailed(self.failures[scope])
        return f"assigned {role}"


@pytest.fixture
def directory():
    return FakeDirectory({"jane.doe@company.com": "U1"})


@pytest.fixture
def assigner():
    return FakeAssigner()


@pytest.fixture
def manifest_root(tmp_path):
    root = tmp_path / "permissions"
    root.mkdir()
    return root


@pytest.fixture
def write_manifest(manifest_root):
    def _write(client, position, body, header=HEADER):
        path = manifest_root / f"{client}-{position}-Permissions.csv"
        path.write_text(header + body, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def make_assigner():
    return FakeAssigner
