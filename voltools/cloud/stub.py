from typing import List

from voltools.cloud.provider_base import VolumeService
from voltools.types import Volume

# Providers that have no volume support yet
STUB_PROVIDERS = ("ibm", "oci", "upcloud", "vsphere")


class StubProvider(VolumeService):
    """
    Volume backend for providers without volume support.

    Every operation succeeds without doing anything so callers never branch on
    the provider. A successful call does NOT mean a volume was created, listed,
    deleted, attached or detached.
    """

    def __init__(self, provider: str = ""):
        self.provider = provider

    def create_volume(self, config, name: str, data: str, size: str, provider: str) -> Volume:
        return Volume()

    def get_all_volumes(self, config) -> List[Volume]:
        return []

    def delete_volume(self, config, name: str) -> None:
        return None

    def attach_volume(self, config, instance: str, name: str, mount: str = "") -> None:
        return None

    def detach_volume(self, config, instance: str, name: str) -> None:
        return None
