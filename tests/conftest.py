"""Shared fixtures and fakes for the volume backend tests."""
import os
from types import SimpleNamespace

import pytest
from azure.core.exceptions import ResourceNotFoundError

from voltools.config import CloudConfig, Config
from voltools.types import Volume

SUBSCRIPTION = "sub-123"
GROUP = "ops-rg"


def vm_id(name: str) -> str:
    return f"/subscriptions/{SUBSCRIPTION}/resourceGroups/{GROUP}/providers/Microsoft.Compute/virtualMachines/{name}"


def disk_id(name: str) -> str:
    return f"/subscriptions/{SUBSCRIPTION}/resourceGroups/{GROUP}/providers/Microsoft.Compute/disks/{name}"


class FakeBuilder:
    """Writes a small stand-in image instead of running mkfs."""

    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def build(self, config, name, data, size, provider):
        self.calls.append((name, data, size, provider))
        if self.error is not None:
            raise self.error
        path = os.path.join(config.volumes_dir, f"{name}.raw")
        with open(path, "wb") as f:
            f.write(b"\0" * 512)
        return Volume(name=name, size=size, path=path, created_at="2024-05-01T10:00:00+00:00")


class FakeUploader:
    def __init__(self, error=None):
        self.uploads = []
        self.error = error

    def upload(self, cloud_config, local_path, image_name):
        if self.error is not None:
            raise self.error
        self.uploads.append((local_path, image_name))
        account = cloud_config.bucket_name or "opsstorage"
        return f"https://{account}.blob.core.windows.net/quickstart-nanos/{image_name}.vhd"


class FakePoller:
    def __init__(self, result=None, error=None, done=True):
        self._result = result
        self._error = error
        self._done = done

    def done(self):
        return self._done

    def wait(self, timeout=None):
        pass

    def result(self):
        if self._error is not None:
            raise self._error
        return self._result


class FakePaged:
    """Mimics azure.core ItemPaged.by_page(); optionally fails after the given pages."""

    def __init__(self, pages, error=None):
        self.pages = pages
        self.error = error

    def by_page(self):
        for page in self.pages:
            yield iter(page)
        if self.error is not None:
            raise self.error


class FakeDisks:
    def __init__(self, page_size=2):
        self.items = {}
        self.page_size = page_size
        self.created = {}
        self.deleted = []

    def add(self, name, size_gb=1, state="Unattached", managed_by=None):
        self.items[name] = SimpleNamespace(
            id=disk_id(name),
            name=name,
            disk_state=state,
            disk_size_gb=size_gb,
            time_created="2024-05-01 10:00:00+00:00",
            managed_by=managed_by,
        )

    def get(self, group, name):
        if name not in self.items:
            raise ResourceNotFoundError(f"The Resource 'Microsoft.Compute/disks/{name}' was not found.")
        return self.items[name]

    def list(self):
        disks = list(self.items.values())
        pages = [disks[i:i + self.page_size] for i in range(0, len(disks), self.page_size)]
        return FakePaged(pages)

    def begin_create_or_update(self, group, name, disk):
        self.created[name] = disk
        self.add(name, size_gb=disk.disk_size_gb)
        return FakePoller(result=self.items[name])

    def begin_delete(self, group, name):
        self.deleted.append(name)
        self.items.pop(name, None)
        return FakePoller()


class FakeVirtualMachines:
    """Records VM updates and keeps disk managed_by references in sync, like Azure does."""

    def __init__(self, disks):
        self.disks = disks
        self.items = {}
        self.updates = []

    def add(self, name, data_disks=None):
        self.items[name] = SimpleNamespace(
            name=name,
            location="eastus",
            hardware_profile=SimpleNamespace(vm_size="Standard_B1s"),
            storage_profile=SimpleNamespace(os_disk="os-disk", data_disks=list(data_disks or [])),
        )

    def get(self, group, name):
        if name not in self.items:
            raise ResourceNotFoundError(f"The Resource 'Microsoft.Compute/virtualMachines/{name}' was not found.")
        return self.items[name]

    def begin_create_or_update(self, group, name, vm):
        self.updates.append((name, [d.name for d in vm.storage_profile.data_disks]))
        self.items[name] = vm
        attached = {d.name for d in vm.storage_profile.data_disks}
        for disk in self.disks.items.values():
            if disk.name in attached:
                disk.managed_by = vm_id(name)
                disk.disk_state = "Attached"
            elif disk.managed_by == vm_id(name):
                disk.managed_by = None
                disk.disk_state = "Unattached"
        return FakePoller(result=vm)


class FakeCompute:
    def __init__(self):
        self.disks = FakeDisks()
        self.virtual_machines = FakeVirtualMachines(self.disks)


@pytest.fixture
def config(tmp_path):
    return Config(
        cloud_config=CloudConfig(provider="azure"),
        volumes_dir=str(tmp_path),
        poll_interval=0,
    )


@pytest.fixture
def fake_compute():
    return FakeCompute()


@pytest.fixture
def builder():
    return FakeBuilder()


@pytest.fixture
def uploader():
    return FakeUploader()
