import time
from typing import List, Optional

from google.oauth2 import service_account
from googleapiclient import discovery
from googleapiclient.errors import HttpError

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
from voltools.cloud.gcp.storage import GCSUploader
from voltools.cloud.local import LocalVolumeBuilder
from voltools.cloud.provider_base import VolumeService
from voltools.cloud.sizes import bytes_to_gb, parse_size
from voltools.types import AttachedDisk, Operation, Volume


class GCPProvider(VolumeService):
    def __init__(self, project: str, zone: str, credentials_path: str = "",
                 compute=None, uploader=None, builder=None):
        """
        Volume backend for GCP persistent disks in a single project and zone.
        Without a credentials path the application default credentials are used.
        """
        self.project = project
        self.zone = zone
        self.credentials_path = credentials_path
        credentials = None
        if credentials_path and (compute is None or uploader is None):
            credentials = service_account.Credentials.from_service_account_file(credentials_path)
        self.compute = compute or discovery.build('compute', 'v1', credentials=credentials)
        self.uploader = uploader or GCSUploader(credentials=credentials)
        self.builder = builder or LocalVolumeBuilder()

    def create_volume(self, config, name: str, data: str, size: str, provider: str) -> Volume:
        """
        Build the volume image locally, upload it, register it as an image and create a disk from it.
        After a successful upload the image name is recorded in config.cloud_config.image_name.
        """
        size_gb = bytes_to_gb(parse_size(size))

        vol = self.builder.build(config, name, data, size, provider)
        source_uri = self.uploader.upload(config.cloud_config, vol.path, name)
        config.cloud_config.image_name = name

        print(f"🖼️ Creating GCP image {name} from {source_uri}")
        image = {
            "name": name,
            "rawDisk": {"source": source_uri},
            "labels": {"createdby": "voltools"}
        }
        try:
            op = self.compute.images().insert(project=self.project, body=image).execute()
        except HttpError as e:
            raise RemoteCreateFailed(f"create image {name}: {e}") from e
        self._wait_for_global_operation(config, op["name"], RemoteCreateFailed)

        print(f"💾 Creating GCP persistent disk {name} ({size_gb} GB)")
        disk = {
            "name": name,
            "sizeGb": str(size_gb),
            "sourceImage": f"global/images/{name}",
            "type": f"projects/{self.project}/zones/{self.zone}/diskTypes/pd-standard",
            "labels": {"createdby": "voltools"}
        }
        try:
            op = self.compute.disks().insert(project=self.project, zone=self.zone, body=disk).execute()
        except HttpError as e:
            raise RemoteCreateFailed(f"create disk {name}: {e}") from e
        self._wait_for_operation(config, op["name"], RemoteCreateFailed)
        return vol

    def get_all_volumes(self, config) -> List[Volume]:
        volumes = []
        try:
            request = self.compute.disks().list(project=self.project, zone=self.zone)
            while request is not None:
                response = request.execute()
                for disk in response.get("items", []):
                    volumes.append(_to_volume(disk))
                request = self.compute.disks().list_next(previous_request=request, previous_response=response)
        except HttpError as e:
            raise ListFailed(f"list gcp disks: {e}") from e
        return volumes

    def delete_volume(self, config, name: str) -> None:
        print(f"🗑️ Deleting GCP persistent disk {name}")
        try:
            op = self.compute.disks().delete(project=self.project, zone=self.zone, disk=name).execute()
        except HttpError as e:
            raise DeleteFailed(f"delete disk {name}: {e}") from e
        self._wait_for_operation(config, op["name"], DeleteFailed)

    def attach_volume(self, config, instance: str, name: str, mount: str = "") -> None:
        """
        Attach disk `name` to `instance`, if not already attached.
        `mount` becomes the device name seen by the guest; it defaults to the disk name.
        """
        print(f"🔗 Attaching disk {name} to instance {instance}")
        inst = self._get_instance(instance)

        try:
            disk = self.compute.disks().get(project=self.project, zone=self.zone, disk=name).execute()
        except HttpError as e:
            raise DiskLookupFailed(f"get disk {name}: {e}") from e

        if _find_attached(inst, name) is not None:
            print(f"⚠️ Disk already attached to '{instance}', skipping.")
            return

        config_body: AttachedDisk = {
            "source": disk["selfLink"],
            "deviceName": mount or name,
            "autoDelete": False,
            "boot": False
        }
        try:
            op = self.compute.instances().attachDisk(
                project=self.project, zone=self.zone, instance=instance, body=config_body
            ).execute()
        except HttpError as e:
            raise AttachUpdateFailed(f"attach disk {name} to {instance}: {e}") from e

        print("⏳ attaching the volume - this can take a few minutes - you can ctrl-c this after a bit")
        self._wait_for_operation(config, op["name"], AttachWaitFailed)

    def detach_volume(self, config, instance: str, name: str) -> None:
        inst = self._get_instance(instance)

        attached = _find_attached(inst, name)
        if attached is None:
            print(f"⚠️ Disk {name} is not attached to {instance}, nothing to detach.")
            return

        try:
            op = self.compute.instances().detachDisk(
                project=self.project, zone=self.zone, instance=instance, deviceName=attached["deviceName"]
            ).execute()
        except HttpError as e:
            raise DetachUpdateFailed(f"detach disk {name} from {instance}: {e}") from e

        print("⏳ detaching the volume - this can take a few minutes - you can ctrl-c this after a bit")
        self._wait_for_operation(config, op["name"], DetachWaitFailed)

    def _get_instance(self, instance: str) -> dict:
        try:
            return self.compute.instances().get(project=self.project, zone=self.zone, instance=instance).execute()
        except HttpError as e:
            raise InstanceLookupFailed(f"get instance {instance}: {e}") from e

    def _wait_for_operation(self, config, operation_name: str, error_cls) -> None:
        """
        Wait for a zonal operation to complete.
        """
        def poll() -> Operation:
            return self.compute.zoneOperations().get(
                project=self.project,
                zone=self.zone,
                operation=operation_name
            ).execute()

        _wait(poll, operation_name, error_cls, config.operation_timeout, config.poll_interval)

    def _wait_for_global_operation(self, config, operation_name: str, error_cls) -> None:
        """
        Wait for a global operation to complete.
        """
        def poll() -> Operation:
            return self.compute.globalOperations().get(
                project=self.project,
                operation=operation_name
            ).execute()

        _wait(poll, operation_name, error_cls, config.operation_timeout, config.poll_interval)


def _find_attached(instance: dict, name: str) -> Optional[AttachedDisk]:
    for disk in instance.get("disks", []):
        if disk.get("source", "").endswith(f"/disks/{name}"):
            return disk
    return None


def _to_volume(disk: dict) -> Volume:
    users = disk.get("users") or []
    return Volume(
        name=disk["name"],
        status=disk.get("status", ""),
        size=str(disk.get("sizeGb", "")),
        path="",
        created_at=disk.get("creationTimestamp", ""),
        attached_to=users[0].split("/")[-1] if users else "",
    )


def _wait(poll, operation_name: str, error_cls, timeout: Optional[float], interval: float) -> None:
    print(f"⏳ Waiting for operation {operation_name} to complete...")
    deadline = None if timeout is None else time.monotonic() + timeout
    while True:
        try:
            result = poll()
        except HttpError as e:
            raise error_cls(f"operation {operation_name}: {e}") from e

        if result.get("status") == "DONE":
            if "error" in result:
                raise error_cls(f"operation {operation_name} failed: {result['error']}")
            print("✅ Operation completed.")
            return
        if deadline is not None and time.monotonic() >= deadline:
            raise error_cls(f"operation {operation_name} did not finish within {timeout}s; it may still complete")
        time.sleep(interval)
