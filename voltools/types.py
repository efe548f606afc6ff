from dataclasses import dataclass
from typing import TypedDict


@dataclass
class Volume:
    """
    Provider-neutral record of a block-storage volume.
    `path` is only set while a local image of the volume exists.
    """
    name: str = ""
    status: str = ""
    size: str = ""
    path: str = ""
    created_at: str = ""
    attached_to: str = ""


class AttachedDisk(TypedDict, total=False):
    source: str
    deviceName: str
    autoDelete: bool
    boot: bool


class Operation(TypedDict, total=False):
    name: str
    status: str
    error: dict
