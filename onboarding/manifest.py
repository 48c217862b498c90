import csv
import logging
from dataclasses import dataclass
from pathlib import Path

from onboarding.errors import MalformedRow, ManifestNotFound

logger = logging.getLogger(__name__)

# Spalten des Manifests (Header-Zeile ist Pflicht)
COLUMNS = ("ResourceType", "ResourceName", "Role", "ResourceGroupName")
REQUIRED_COLUMNS = ("ResourceType", "ResourceName", "Role")


@dataclass(frozen=True)
class GrantRequest:
    resource_type: str
    resource_name: str
    role: str
    resource_group_name: str = ""
    line: int = 0


def manifest_key(client: str, position: str) -> str:
    return f"{client}-{position}-Permissions"


def manifest_path(client: str, position: str, root) -> Path:
    return Path(root) / f"{manifest_key(client, position)}.csv"


def parse_row(row: dict, line: int):
    """Wandelt eine CSV-Zeile in einen GrantRequest um.

    Fehlende Werte am Zeilenende liefert der DictReader als ``None``; sie
    werden als leere Strings behandelt. Fehlt ein Pflichtfeld, wird statt
    des Requests ein ``MalformedRow`` zurückgegeben.
    """
    values = {column: (row.get(column) or "").strip() for column in COLUMNS}
    request = GrantRequest(
        resource_type=values["ResourceType"],
        resource_name=values["ResourceName"],
        role=values["Role"],
        resource_group_name=values["ResourceGroupName"],
        line=line,
    )
    missing = [column for column in REQUIRED_COLUMNS if not values[column]]
    if missing:
        return MalformedRow(request, missing)
    return request


def load_manifest(client: str, position: str, root) -> list:
    """Lädt das Berechtigungsmanifest für Kunde und Position.

    Die Reihenfolge der Zeilen bleibt erhalten. Fehlerhafte Zeilen stehen als
    ``MalformedRow`` an ihrer Stelle in der Liste.
    """
    path = manifest_path(client, position, root)
    if not path.is_file():
        raise ManifestNotFound(path)

    entries = []
    with path.open(mode="r", newline="", encoding="utf-8-sig") as csvfile:
        reader = csv.DictReader(csvfile, skipinitialspace=True)
        if reader.fieldnames:
            reader.fieldnames = [name.strip() for name in reader.fieldnames]
        for row in reader:
            entry = parse_row(row, reader.line_num)
            if isinstance(entry, MalformedRow):
                logger.warning(f"Fehlerhafte Zeile im Manifest {path.name}: {entry}")
            entries.append(entry)

    logger.info(f"{len(entries)} Zeile(n) aus {path} geladen")
    return entries
