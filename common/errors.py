"""Error taxonomy shared by the watch server and the monitor client."""


class FolderWatchError(Exception):
    """Base class for all folder watch errors."""


class DirectoryAccessError(FolderWatchError):
    """A watched or served directory could not be read or created."""


class InvalidFolderError(FolderWatchError, ValueError):
    """A folder name would escape the served base directory."""


class ClassificationSkip(FolderWatchError):
    """A filesystem event refers to a file that is not a recognized media file."""


class SubscriberClosedError(FolderWatchError):
    """A push was attempted on a subscriber whose channel is already closed."""


class SnapshotQueryError(FolderWatchError):
    """The snapshot listing could not be fetched from the watch server."""


class SubscriptionOpenError(FolderWatchError):
    """The push channel to the watch server could not be established."""


class SubscriptionTransportError(FolderWatchError):
    """An established push channel failed."""


class StorageError(FolderWatchError):
    """An object store or record store call failed."""


class ComicWorkflowError(FolderWatchError):
    """A comic workflow step (PDF upload, image upload) failed."""
