"""
Filesystem Adapter Abstract Base Class

Generic filesystem-operation contract. Adapters translate these calls into
whatever their backing store understands, and share the path prefix handling
implemented here.
"""

from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Dict, List, Optional, Union

FileInfo = Dict[str, Any]
AdapterConfig = Optional[Dict[str, Any]]


class FilesystemAdapterInterface(ABC):
    """
    Abstract interface for filesystem adapters

    Operations an adapter cannot support return False instead of raising.
    """

    path_separator = "/"

    def __init__(self, path_prefix: Optional[str] = None):
        self._path_prefix: Optional[str] = None
        self.set_path_prefix(path_prefix)

    # Path prefix handling

    def set_path_prefix(self, prefix: Optional[str]) -> None:
        prefix = "" if prefix is None else str(prefix)
        if prefix == "":
            self._path_prefix = None
            return
        self._path_prefix = prefix.rstrip("\\/") + self.path_separator

    def get_path_prefix(self) -> Optional[str]:
        return self._path_prefix

    def apply_path_prefix(self, path: str) -> str:
        return (self._path_prefix or "") + path.lstrip("\\/")

    def remove_path_prefix(self, path: str) -> str:
        prefix = self._path_prefix or ""
        if prefix and path.startswith(prefix):
            return path[len(prefix):]
        return path

    # Write operations

    @abstractmethod
    def write(self, path: str, contents: Union[bytes, str], config: AdapterConfig = None) -> Union[FileInfo, bool]:
        """Write a new file."""
        pass

    @abstractmethod
    def write_stream(self, path: str, resource: BinaryIO, config: AdapterConfig = None) -> Union[FileInfo, bool]:
        """Write a new file using a stream."""
        pass

    @abstractmethod
    def update(self, path: str, contents: Union[bytes, str], config: AdapterConfig = None) -> Union[FileInfo, bool]:
        """Update a file."""
        pass

    @abstractmethod
    def update_stream(self, path: str, resource: BinaryIO, config: AdapterConfig = None) -> Union[FileInfo, bool]:
        """Update a file using a stream."""
        pass

    @abstractmethod
    def rename(self, path: str, new_path: str) -> bool:
        pass

    @abstractmethod
    def copy(self, path: str, new_path: str) -> Union[FileInfo, bool]:
        pass

    @abstractmethod
    def delete(self, path: str) -> bool:
        pass

    @abstractmethod
    def delete_dir(self, dirname: str) -> bool:
        pass

    @abstractmethod
    def create_dir(self, dirname: str, config: AdapterConfig = None) -> Union[FileInfo, bool]:
        pass

    def set_visibility(self, path: str, visibility: str) -> Union[FileInfo, bool]:
        return False

    # Read operations

    @abstractmethod
    def has(self, path: str) -> bool:
        """Check whether a file exists."""
        pass

    @abstractmethod
    def read(self, path: str) -> Union[FileInfo, bool]:
        """Read a file. Returns {'contents': bytes}."""
        pass

    @abstractmethod
    def read_stream(self, path: str) -> Union[FileInfo, bool]:
        """Read a file as a stream. Returns {'stream': BinaryIO}."""
        pass

    @abstractmethod
    def list_contents(self, directory: str = "", recursive: bool = False) -> List[FileInfo]:
        pass

    @abstractmethod
    def get_metadata(self, path: str) -> Union[FileInfo, bool]:
        pass

    @abstractmethod
    def get_size(self, path: str) -> Union[FileInfo, bool]:
        pass

    @abstractmethod
    def get_mimetype(self, path: str) -> Union[FileInfo, bool]:
        pass

    @abstractmethod
    def get_timestamp(self, path: str) -> Union[FileInfo, bool]:
        pass

    def get_visibility(self, path: str) -> Union[FileInfo, bool]:
        return False
