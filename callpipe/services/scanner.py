import os
from datetime import datetime
from typing import Iterable, List, NamedTuple

from ..errors import ConfigurationError

AUDIO_EXTENSIONS = {"wav", "mp3", "m4a"}
# recognized by the single-file path and the directory listing
EXTENDED_AUDIO_EXTENSIONS = AUDIO_EXTENSIONS | {"aac", "ogg"}


class ScannedFile(NamedTuple):
    name: str
    path: str
    size: int
    mtime: float
    extension: str

    @property
    def modified(self):
        return datetime.fromtimestamp(self.mtime)

    def to_dict(self):
        return {
            "name": self.name,
            "path": self.path,
            "size": self.size,
            "modified": self.modified.isoformat(),
            "extension": self.extension,
        }


def _extension(name):
    return name.rsplit(".", 1)[1].lower() if "." in name else ""


def _require_directory(directory):
    if not directory:
        raise ConfigurationError("RECORDS_PATH is not set")
    if not os.path.isdir(directory):
        raise ConfigurationError(f"Records directory does not exist: {directory}", directory=directory)


def list_directory(directory: str, extensions: Iterable[str] = None) -> List[ScannedFile]:
    """Regular files in ``directory``, newest first.

    ``extensions`` restricts the result to an allow-list; None keeps every file.
    """
    _require_directory(directory)
    allowed = {e.lower() for e in extensions} if extensions is not None else None
    files = []
    with os.scandir(directory) as it:
        for entry in it:
            if not entry.is_file():
                continue
            ext = _extension(entry.name)
            if allowed is not None and ext not in allowed:
                continue
            st = entry.stat()
            files.append(ScannedFile(entry.name, entry.path, st.st_size, st.st_mtime, ext))
    files.sort(key=lambda f: f.mtime, reverse=True)
    return files


def scan_audio_files(directory: str, extended: bool = False) -> List[ScannedFile]:
    return list_directory(directory, EXTENDED_AUDIO_EXTENSIONS if extended else AUDIO_EXTENSIONS)
