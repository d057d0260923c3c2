"""
Public secured files.

Files are stored in a publicly served directory under a hashed name, next to a
key-file holding the encrypted access key. A file can only be rendered when the
caller supplies the key that was generated when it was added; the stored names
cannot be guessed from the public URL.

    store = SecuredFileStore(StoreConfig.from_env())
    urls = store.add("/tmp/report.pdf", "reports/")
    # urls["read"] == "reports/report.pdf?k=<key>"
"""
import dataclasses
import hashlib
import hmac
from dataclasses import dataclass
from pathlib import Path

from flask import Response

import config
import files
from assets import AssetProvider, CONTROL_DESCRIPTOR, RENDER_SCRIPT
from storage import KeyCodec, address_hash, generate_secret_key

CHUNK_SIZE = 64 * 1024


class SecuredFileError(Exception):
    pass


class ConfigurationError(SecuredFileError):
    pass


class StorageWriteFailed(SecuredFileError):
    pass


class InvalidUrl(SecuredFileError):
    pass


class ResourceNotFound(SecuredFileError):
    pass


class NotAuthorized(SecuredFileError):
    pass


@dataclass(frozen=True)
class StoreConfig:
    """Settings shared by every secured file of one store. Build once, pass around."""

    store_path: Path | None
    bootstrap_path: Path = config.BOOTSTRAP_PATH
    hash_method: str = config.HASH_METHOD
    encode_method: str = config.ENCODE_METHOD
    initialization_vector: str = config.INITIALIZATION_VECTOR
    private_key: str = config.PRIVATE_KEY
    url_key_arg: str = config.URL_KEY_ARG
    base_key_length: int = config.BASE_KEY_LENGTH

    def __post_init__(self):
        if self.store_path:
            object.__setattr__(self, "store_path", Path(self.store_path))
        object.__setattr__(self, "bootstrap_path", Path(self.bootstrap_path))
        if not self.bootstrap_path.exists():
            raise ConfigurationError(
                f"Bootstrap path not found: {self.bootstrap_path}. "
                "Set SECURED_BOOTSTRAP_PATH to the directory containing app.py."
            )
        try:
            digest_size = hashlib.new(self.hash_method).digest_size
        except ValueError as e:
            raise ConfigurationError(f"Unknown hash method: {self.hash_method}") from e
        # Variable length digests (shake_*) cannot name files
        if digest_size == 0:
            raise ConfigurationError(f"Hash method needs a fixed digest size: {self.hash_method}")
        if self.base_key_length < 1:
            raise ConfigurationError("Key length must be positive")

    @classmethod
    def from_env(cls) -> "StoreConfig":
        return cls(store_path=config.STORE_PATH)

    def require_store_path(self) -> Path:
        if not self.store_path:
            raise ConfigurationError("A storage directory must be configured before use.")
        return self.store_path

    def with_base_key_length(self, length: int) -> "StoreConfig":
        return dataclasses.replace(self, base_key_length=length)

    def codec(self) -> KeyCodec:
        try:
            return KeyCodec(self.private_key, self.initialization_vector, self.encode_method)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def blob_path(self, hash_key: str) -> Path:
        return self.require_store_path() / hash_key

    def key_path(self, hash_key: str) -> Path:
        return self.require_store_path() / f"{hash_key}.key"


def ensure_ready(store_config: StoreConfig, provider: AssetProvider | None = None) -> list[str]:
    """Create the store directory and its .htaccess / read.py if missing.

    Returns the names of the files written; existing files are left alone.
    """
    provider = provider or AssetProvider()
    store_path = store_config.require_store_path()
    store_path.mkdir(parents=True, exist_ok=True)
    written = []

    descriptor = store_path / config.CONTROL_DESCRIPTOR_NAME
    if not descriptor.exists():
        files.write_all(descriptor, _template(provider, CONTROL_DESCRIPTOR))
        written.append(descriptor.name)

    script = store_path / config.RENDER_SCRIPT_NAME
    if not script.exists():
        content = _template(provider, RENDER_SCRIPT).replace(
            config.AUTOLOADER_PLACEHOLDER.encode(), repr(str(store_config.bootstrap_path)).encode()
        )
        files.write_all(script, content)
        written.append(script.name)
    return written


def _template(provider: AssetProvider, key: str) -> bytes:
    content = provider.content_for(key)
    if content is None:
        raise ConfigurationError(f"No template available for {key}")
    return content


@dataclass(frozen=True)
class Valid:
    handle: "SecuredFile"


@dataclass(frozen=True)
class Invalid:
    reason: str


class SecuredFile:
    """A (path, key) pair checked against the store. Validity is fixed at construction."""

    def __init__(self, store_config: StoreConfig, path: str, secret_key: str):
        self._config = store_config
        self._path = path
        self._hash = address_hash(path, "", secret_key, store_config.hash_method)
        self._error = ""

        blob, key_file = store_config.blob_path(self._hash), store_config.key_path(self._hash)
        if files.exists(blob) and files.exists(key_file):
            stored = store_config.codec().decode(files.read_all(key_file))
            if stored is not None and hmac.compare_digest(stored.encode(), secret_key.encode()):
                self._valid = True
                return
            self._error = config.ERROR_BAD_KEY
        else:
            self._error = config.ERROR_UNAVAILABLE
        self._valid = False

    @classmethod
    def verify(cls, store_config: StoreConfig, path: str, secret_key: str) -> Valid | Invalid:
        handle = cls(store_config, path, secret_key)
        if handle.is_valid:
            return Valid(handle)
        return Invalid(handle.last_error)

    @property
    def path(self) -> str:
        return self._path

    @property
    def address_hash(self) -> str:
        return self._hash

    @property
    def is_valid(self) -> bool:
        return self._valid

    @property
    def last_error(self) -> str:
        return self._error

    @property
    def file_name(self) -> str:
        return files.file_name(self._path)

    @property
    def blob_path(self) -> Path:
        return self._config.blob_path(self._hash)

    @property
    def key_path(self) -> Path:
        return self._config.key_path(self._hash)

    def _require_valid(self):
        if not self._valid:
            raise NotAuthorized("Secured access to the file has not been verified.")

    def _response(self, extra_headers: dict) -> Response:
        size = self.blob_path.stat().st_size
        headers = {
            "Expires": "0",
            "Cache-Control": "must-revalidate",
            "Pragma": "public",
            "Content-Length": str(size),
        }
        headers.update(extra_headers)
        return Response(
            _iter_chunks(self.blob_path),
            mimetype=files.sniff_mime_type(self.blob_path, self._path),
            headers=headers,
        )

    def render(self) -> Response:
        """Response serving the file inline."""
        self._require_valid()
        return self._response({})

    def force_download(self) -> Response:
        """Response serving the file as an attachment named after the requested path."""
        self._require_valid()
        return self._response({
            "Content-Description": "File Transfer",
            "Content-Disposition": f'attachment; filename="{self.file_name}"',
        })

    def delete(self) -> None:
        self._require_valid()
        files.remove(self.blob_path)
        files.remove(self.key_path)


def _iter_chunks(path: Path):
    with open(path, "rb") as fh:
        while chunk := fh.read(CHUNK_SIZE):
            yield chunk


class SecuredFileStore:
    def __init__(self, store_config: StoreConfig, provider: AssetProvider | None = None):
        self.config = store_config
        self.provider = provider or AssetProvider()

    def ensure_ready(self) -> list[str]:
        return ensure_ready(self.config, self.provider)

    def build_url(self, relative_path: str, file_name: str, secret_key: str) -> str:
        return f"{relative_path}{file_name}?{self.config.url_key_arg}={secret_key}"

    def add(self, file_to_copy: str | Path, relative_path: str = "") -> dict:
        """
        Copy a file into the store under a fresh secret key.
        Returns {"read": url, "download": url, "key": secret key}; URLs are relative
        to the store directory.
        """
        self.ensure_ready()
        file_name = files.file_name(file_to_copy)
        if relative_path and not relative_path.endswith("/"):
            relative_path += "/"

        secret_key = generate_secret_key(self.config.base_key_length)
        hash_key = address_hash(relative_path, file_name, secret_key, self.config.hash_method)

        try:
            files.copy(file_to_copy, self.config.blob_path(hash_key))
        except files.FileAccessError as e:
            raise StorageWriteFailed(f"Unable to copy file {file_to_copy}") from e
        try:
            files.write_all(self.config.key_path(hash_key), self.config.codec().encode(secret_key))
        except files.FileAccessError as e:
            raise StorageWriteFailed(f"Unable to write key file for {file_to_copy}") from e

        url = self.build_url(relative_path, file_name, secret_key)
        return {"read": url, "download": f"{url}&{config.DOWNLOAD_FLAG}", "key": secret_key}

    def parse_url(self, url: str) -> tuple[str, str]:
        """Split a secured URL into (path, key)."""
        url = url.replace(f"&{config.DOWNLOAD_FLAG}", "")
        parts = url.split(f"?{self.config.url_key_arg}=")
        if len(parts) != 2:
            raise InvalidUrl(f"Invalid url: {url}")
        return parts[0], parts[1]

    def delete_from_url(self, url: str) -> None:
        path, secret_key = self.parse_url(url)
        hash_key = address_hash(path, "", secret_key, self.config.hash_method)
        blob, key_file = self.config.blob_path(hash_key), self.config.key_path(hash_key)
        if not files.exists(blob) or not files.exists(key_file):
            raise ResourceNotFound(f"Resource not found: {path}")
        files.remove(blob)
        files.remove(key_file)

    def open(self, path: str, secret_key: str) -> SecuredFile:
        return SecuredFile(self.config, path, secret_key)

    def verify(self, path: str, secret_key: str) -> Valid | Invalid:
        return SecuredFile.verify(self.config, path, secret_key)
