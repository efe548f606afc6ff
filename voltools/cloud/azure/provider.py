import time
from typing import List, Optional

from azure.core.exceptions import AzureError
from azure.identity import DefaultAzureCredential
from azure.mgmt.compute import ComputeManagementClient
from azure.mgmt.compute.models import CreationData, DataDisk, Disk, ManagedDiskParameters

from voltools.cloud.azure.storage import AzureBlobUploader
from voltools.cloud.errors import (
    AttachUpdateFailed,
    AttachWaitFailed,
    DeleteFailed,
    DetachUpdateFailed,
    DetachWaitFailed,
    DiskLookupFailed,
    InstanceLookupFailed,
    ListFailed,
    RemoteCreateFailed,
)
from voltools.cloud.local import LocalVolumeBuilder
from voltools.cloud.provider_base import VolumeService
from voltools.cloud.sizes import bytes_to_gb, parse_size
from voltools.types import Volume


class AzureProvider(VolumeService):
    def __init__(self, subscription_id: str, resource_group: str, location: str, storage_account: str,
                 credential=None, compute=None, uploader=None, builder=None):
        """
        Volume backend for Azure managed disks.
        Each provider instance owns its subscription, resource group and storage account.
        """
        self.subscription_id = subscription_id
        self.resource_group = resource_group
        self.location = location
        self.storage_account = storage_account
        if credential is None and (compute is None or uploader is None):
            credential = DefaultAzureCredential()
        self.compute = compute or ComputeManagementClient(credential, subscription_id)
        self.uploader = uploader or AzureBlobUploader(storage_account, credential=credential)
        self.builder = builder or LocalVolumeBuilder()

    def create_volume(self, config, name: str, data: str, size: str, provider: str) -> Volume:
        """
        Build the volume image locally, upload it and import it as a managed disk.
        After a successful upload the image name is recorded in config.cloud_config.image_name.
        The returned volume still points at the local image.
        """
        size_gb = bytes_to_gb(parse_size(size))

        vol = self.builder.build(config, name, data, size, provider)
        source_uri = self.uploader.upload(config.cloud_config, vol.path, name)
        config.cloud_config.image_name = name

        bucket = config.cloud_config.bucket_name or self.storage_account
        disk = Disk(
            location=self.location,
            hyper_v_generation="V1",
            disk_size_gb=size_gb,
            creation_data=CreationData(
                create_option="Import",
                source_uri=source_uri,
                storage_account_id=(
                    f"/subscriptions/{self.subscription_id}/resourceGroups/{self.resource_group}"
                    f"/providers/Microsoft.Storage/storageAccounts/{bucket}"
                ),
            ),
        )

        print(f"💾 Creating Azure disk {name} ({size_gb} GB)")
        try:
            poller = self.compute.disks.begin_create_or_update(self.resource_group, name, disk)
        except AzureError as e:
            raise RemoteCreateFailed(f"create disk {name}: {e}") from e
        _wait_for_poller(poller, RemoteCreateFailed, f"disk {name} creation",
                         timeout=config.operation_timeout, interval=config.poll_interval)
        return vol

    def get_all_volumes(self, config) -> List[Volume]:
        volumes = []
        try:
            for page in self.compute.disks.list().by_page():
                for disk in page:
                    volumes.append(_to_volume(disk))
        except AzureError as e:
            raise ListFailed(f"list azure disks: {e}") from e
        return volumes

    def delete_volume(self, config, name: str) -> None:
        # Azure answers a delete of a missing disk with 204, so look it up first
        try:
            self.compute.disks.get(self.resource_group, name)
            poller = self.compute.disks.begin_delete(self.resource_group, name)
        except AzureError as e:
            raise DeleteFailed(f"delete disk {name}: {e}") from e
        _wait_for_poller(poller, DeleteFailed, f"disk {name} deletion",
                         timeout=config.operation_timeout, interval=config.poll_interval)

    def attach_volume(self, config, instance: str, name: str, mount: str = "") -> None:
        """
        Attach disk `name` to VM `instance` at LUN 0.
        This replaces the VM's whole data-disk list, so any other data disk is detached.
        Concurrent attaches to the same VM race; the last update wins.
        """
        vm = self._get_instance(instance)

        try:
            disk = self.compute.disks.get(self.resource_group, name)
        except AzureError as e:
            raise DiskLookupFailed(f"get disk {name}: {e}") from e

        vm.storage_profile.data_disks = [
            DataDisk(
                lun=0,
                name=name,
                create_option="Attach",
                managed_disk=ManagedDiskParameters(id=disk.id),
            )
        ]

        self._update_instance(config, instance, vm, "attaching", AttachUpdateFailed, AttachWaitFailed)

    def detach_volume(self, config, instance: str, name: str) -> None:
        vm = self._get_instance(instance)

        current = vm.storage_profile.data_disks or []
        remaining = [d for d in current if d.name != name]
        if len(remaining) == len(current):
            print(f"⚠️ Disk {name} is not attached to {instance}, nothing to detach.")
            return

        vm.storage_profile.data_disks = remaining
        self._update_instance(config, instance, vm, "detaching", DetachUpdateFailed, DetachWaitFailed)

    def _get_instance(self, instance: str):
        try:
            return self.compute.virtual_machines.get(self.resource_group, instance)
        except AzureError as e:
            raise InstanceLookupFailed(f"get instance {instance}: {e}") from e

    def _update_instance(self, config, instance: str, vm, action: str, update_error, wait_error) -> None:
        try:
            poller = self.compute.virtual_machines.begin_create_or_update(self.resource_group, instance, vm)
        except AzureError as e:
            raise update_error(f"cannot update vm {instance}: {e}") from e

        print(f"🔗 {action} the volume - this can take a few minutes - you can ctrl-c this after a bit")
        _wait_for_poller(poller, wait_error, f"vm {instance} update",
                         timeout=config.operation_timeout, interval=config.poll_interval)


def _to_volume(disk) -> Volume:
    attached_to = ""
    if disk.managed_by:
        attached_to = disk.managed_by.split("/")[-1]

    state = disk.disk_state or ""
    return Volume(
        name=disk.name,
        status=str(getattr(state, "value", state)),
        size="" if disk.disk_size_gb is None else str(disk.disk_size_gb),
        path="",
        created_at="" if disk.time_created is None else str(disk.time_created),
        attached_to=attached_to,
    )


def _wait_for_poller(poller, error_cls, description: str, timeout: Optional[float] = None, interval: float = 2.0):
    """
    Block until a long-running operation reaches a terminal state.
    With timeout=None this waits as long as the operation runs.
    """
    print(f"⏳ Waiting for {description} to complete...")
    deadline = None if timeout is None else time.monotonic() + timeout
    try:
        while not poller.done():
            if deadline is not None and time.monotonic() >= deadline:
                raise error_cls(f"{description} did not finish within {timeout}s; it may still complete")
            poller.wait(interval)
        result = poller.result()
    except AzureError as e:
        raise error_cls(f"{description} failed: {e}") from e
    print(f"✅ {description} completed.")
    return result
