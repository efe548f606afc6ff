from voltools.cloud.provider_base import VolumeService
from voltools.cloud.stub import STUB_PROVIDERS, StubProvider


def get_provider(config, **overrides) -> VolumeService:
    """
    Build the volume backend named by config.cloud_config.provider.
    Keyword overrides (compute, uploader, builder, credential) are passed to the backend.
    Raises ValueError for an unknown provider.
    """
    cloud = config.cloud_config
    name = (cloud.provider or "").lower()

    # Import here so only the selected provider's SDK is loaded
    if name == "azure":
        from voltools.cloud.azure.provider import AzureProvider
        return AzureProvider(
            subscription_id=cloud.project_id,
            resource_group=cloud.resource_group,
            location=cloud.zone,
            storage_account=cloud.storage_account,
            **overrides
        )
    elif name == "gcp":
        from voltools.cloud.gcp.provider import GCPProvider
        return GCPProvider(
            project=cloud.project_id,
            zone=cloud.zone,
            credentials_path=cloud.credentials_path,
            **overrides
        )
    elif name in STUB_PROVIDERS:
        return StubProvider(name)
    else:
        raise ValueError(f"Unsupported provider type: {cloud.provider!r}")
