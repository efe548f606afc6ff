from typing import List

from voltools.types import Volume


class VolumeService:
    """
    Volume lifecycle operations every cloud provider backend implements.
    All operations key on the volume name and re-read provider state on each call.
    """

    def create_volume(self, config, name: str, data: str, size: str, provider: str) -> Volume:
        raise NotImplementedError

    def get_all_volumes(self, config) -> List[Volume]:
        raise NotImplementedError

    def delete_volume(self, config, name: str) -> None:
        raise NotImplementedError

    def attach_volume(self, config, instance: str, name: str, mount: str = "") -> None:
        raise NotImplementedError

    def detach_volume(self, config, instance: str, name: str) -> None:
        raise NotImplementedError
