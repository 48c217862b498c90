from enum import Enum

from onboarding.errors import UnknownResourceType


class ResourceType(str, Enum):
    RESOURCE_GROUP = "ResourceGroup"
    STORAGE_ACCOUNT = "StorageAccount"
    VIRTUAL_MACHINE = "VirtualMachine"
    APP_SERVICE = "AppService"
    AZURE_FUNCTION = "AzureFunction"
    KEY_VAULT = "KeyVault"
    AZURE_SQL_DATABASE = "AzureSQLDatabase"
    COSMOS_DB = "CosmosDB"
    AKS = "AKS"
    LOG_ANALYTICS = "LogAnalytics"
    API_MANAGEMENT = "APIManagement"
    SERVICE_BUS = "ServiceBus"
    AZURE_SYNAPSE_ANALYTICS = "AzureSynapseAnalytics"
    DATA_FACTORY = "DataFactory"
    AZURE_BASTION = "AzureBastion"
    CONTAINER_REGISTRY = "ContainerRegistry"
    NETWORK = "Network"


# Provider-Pfad unterhalb von /subscriptions/S/resourceGroups/G/providers
# {name} wird durch den Ressourcennamen ersetzt
PROVIDER_PATHS = {
    ResourceType.STORAGE_ACCOUNT: "Microsoft.Storage/storageAccounts/{name}",
    ResourceType.VIRTUAL_MACHINE: "Microsoft.Compute/virtualMachines/{name}",
    ResourceType.APP_SERVICE: "Microsoft.Web/sites/{name}",
    ResourceType.AZURE_FUNCTION: "Microsoft.Web/sites/{name}/functions",
    ResourceType.KEY_VAULT: "Microsoft.KeyVault/vaults/{name}",
    ResourceType.AZURE_SQL_DATABASE: "Microsoft.Sql/servers/{name}",
    ResourceType.COSMOS_DB: "Microsoft.DocumentDB/databaseAccounts/{name}",
    ResourceType.AKS: "Microsoft.ContainerService/managedClusters/{name}",
    ResourceType.LOG_ANALYTICS: "Microsoft.OperationalInsights/workspaces/{name}",
    ResourceType.API_MANAGEMENT: "Microsoft.ApiManagement/service/{name}",
    ResourceType.SERVICE_BUS: "Microsoft.ServiceBus/namespaces/{name}",
    ResourceType.AZURE_SYNAPSE_ANALYTICS: "Microsoft.Synapse/workspaces/{name}",
    ResourceType.DATA_FACTORY: "Microsoft.DataFactory/factories/{name}",
    ResourceType.AZURE_BASTION: "Microsoft.Network/bastionHosts/{name}",
    ResourceType.CONTAINER_REGISTRY: "Microsoft.ContainerRegistry/registries/{name}",
    ResourceType.NETWORK: "Microsoft.Network/virtualNetworks/{name}",
}


def resource_group_scope(subscription_id: str, resource_group_name: str) -> str:
    return f"/subscriptions/{subscription_id}/resourceGroups/{resource_group_name}"


def parse_resource_type(tag: str) -> ResourceType:
    try:
        return ResourceType(tag)
    except ValueError:
        raise UnknownResourceType(tag) from None


def resolve_scope(resource_type, subscription_id: str, resource_group_name: str, resource_name: str) -> str:
    """Liefert den vollqualifizierten Scope für eine Manifestzeile.

    Für ``ResourceGroup`` wird der Ressourcenname als Gruppenname verwendet,
    die Spalte ResourceGroupName wird dort ignoriert. Leere Werte werden
    unverändert eingesetzt.
    """
    resource_type = parse_resource_type(resource_type)
    if resource_type is ResourceType.RESOURCE_GROUP:
        return resource_group_scope(subscription_id, resource_name)

    provider_path = PROVIDER_PATHS[resource_type].format(name=resource_name)
    return f"{resource_group_scope(subscription_id, resource_group_name)}/providers/{provider_path}"
