class VolumeError(Exception):
    """Base class for volume lifecycle failures."""


class InvalidSize(VolumeError):
    pass


class LocalSynthesisFailed(VolumeError):
    pass


class UploadFailed(VolumeError):
    pass


class RemoteCreateFailed(VolumeError):
    pass


class ListFailed(VolumeError):
    pass


class DeleteFailed(VolumeError):
    pass


class InstanceLookupFailed(VolumeError):
    pass


class DiskLookupFailed(VolumeError):
    pass


class AttachUpdateFailed(VolumeError):
    pass


class DetachUpdateFailed(VolumeError):
    pass


class OperationWaitFailed(VolumeError):
    """
    The provider accepted the change but waiting for it to finish failed.
    The change may still have been applied.
    """


class AttachWaitFailed(OperationWaitFailed):
    pass


class DetachWaitFailed(OperationWaitFailed):
    pass
