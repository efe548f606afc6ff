import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG_FILE = "~/.voltools/config.yaml"

# Environment variable -> CloudConfig field, per provider
ENV_OVERRIDES = {
    "": {
        "VOLTOOLS_PROVIDER": "provider",
        "VOLTOOLS_BUCKET": "bucket_name",
    },
    "gcp": {
        "GCP_PROJECT": "project_id",
        "GCP_ZONE": "zone",
        "GOOGLE_APPLICATION_CREDENTIALS": "credentials_path",
    },
    "azure": {
        "AZURE_SUBSCRIPTION_ID": "project_id",
        "AZURE_RESOURCE_GROUP": "resource_group",
        "AZURE_LOCATION": "zone",
        "AZURE_STORAGE_ACCOUNT": "storage_account",
    },
}


@dataclass
class CloudConfig:
    provider: str = ""
    # GCP project or Azure subscription
    project_id: str = ""
    # GCP zone or Azure location
    zone: str = ""
    resource_group: str = ""
    storage_account: str = ""
    bucket_name: str = ""
    image_name: str = ""
    credentials_path: str = ""


@dataclass
class Config:
    cloud_config: CloudConfig = field(default_factory=CloudConfig)
    mkfs: str = "mkfs"
    volumes_dir: str = "~/.voltools/volumes"
    # None waits for long-running operations until they finish
    operation_timeout: Optional[float] = None
    poll_interval: float = 2.0


def _pick(cls, data: dict) -> dict:
    known = {f.name for f in fields(cls)} - {"cloud_config"}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {', '.join(sorted(unknown))}")
    return dict(data)


def _apply_env(cloud_config: CloudConfig, overrides: dict) -> None:
    for var, attr in overrides.items():
        value = os.environ.get(var)
        if value:
            setattr(cloud_config, attr, value)


def load_config(path: Optional[str] = None, provider: Optional[str] = None) -> Config:
    """
    Load configuration from a YAML file (if present), then apply environment overrides.
    The file holds Config keys at the top level and CloudConfig keys under `cloud:`.
    An explicit provider wins over the file and VOLTOOLS_PROVIDER, and selects which
    provider-specific environment variables apply.
    """
    config_path = Path(os.path.expanduser(path or DEFAULT_CONFIG_FILE))
    data = {}
    if config_path.exists():
        with open(config_path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Failed to parse {config_path}: {e}")
        if not isinstance(data, dict):
            raise ValueError(f"{config_path} must contain a mapping")
    elif path:
        raise ValueError(f"Config file not found: {config_path}")

    cloud = data.pop("cloud", None) or {}
    if not isinstance(cloud, dict):
        raise ValueError(f"{config_path}: 'cloud' must be a mapping")

    config = Config(cloud_config=CloudConfig(**_pick(CloudConfig, cloud)), **_pick(Config, data))

    _apply_env(config.cloud_config, ENV_OVERRIDES[""])
    if provider:
        config.cloud_config.provider = provider
    _apply_env(config.cloud_config, ENV_OVERRIDES.get(config.cloud_config.provider.lower(), {}))

    return config
