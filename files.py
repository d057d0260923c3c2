"""Raw file access used by the secured file store."""
import fcntl
import mimetypes
import shutil
from pathlib import Path

import filetype


class FileAccessError(OSError):
    pass


class WriteDenied(FileAccessError):
    pass


def exists(path: Path) -> bool:
    return Path(path).is_file()


def read_all(path: Path) -> bytes:
    return Path(path).read_bytes()


def write_all(path: Path, data: bytes | str, append: bool = False) -> None:
    """Write data under an exclusive lock. Raises WriteDenied on failure."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    path = Path(path)
    if path.is_dir():
        raise WriteDenied(f"Cannot write to {path}: it is a directory")
    try:
        with open(path, "ab" if append else "r+b" if path.exists() else "wb") as fh:
            fcntl.flock(fh, fcntl.LOCK_EX)
            try:
                if not append:
                    # Truncate only once the lock is held
                    fh.seek(0)
                    fh.truncate()
                fh.write(data)
                fh.flush()
            finally:
                fcntl.flock(fh, fcntl.LOCK_UN)
    except OSError as e:
        raise WriteDenied(f"Cannot write to {path}: check access rights ({e})") from e


def copy(src: Path, dst: Path) -> None:
    try:
        shutil.copyfile(src, dst)
    except OSError as e:
        raise WriteDenied(f"Cannot copy {src} to {dst}: {e}") from e


def remove(path: Path) -> None:
    Path(path).unlink()


def file_name(path: str | Path) -> str:
    return Path(path).name


def mime_type(path: str | Path) -> str:
    return mimetypes.guess_type(str(path))[0] or "application/octet-stream"


def sniff_mime_type(path: Path, name: str | Path = "") -> str:
    """MIME type from the file's leading bytes, else guessed from name."""
    return filetype.guess_mime(str(path)) or mime_type(name or path)
