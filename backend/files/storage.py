"""
Storage for content-addressed uploads.
"""

from django.core.files.storage import FileSystemStorage, storages


class OverwriteStorage(FileSystemStorage):
    """
    File system storage that keeps the requested name.

    Uploads are named by content hash, so an existing file with the same
    name holds the same content: it is replaced instead of renamed.
    """

    def get_available_name(self, name, max_length=None):
        if self.exists(name):
            self.delete(name)
        return name


def get_upload_storage():
    """Storage configured under STORAGES['uploads']."""
    return storages['uploads']
