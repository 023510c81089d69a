"""Directory-backed container storage for nuts-tool.

A container is a directory holding a ``header.json`` and one file per block
below ``blocks/``. Encrypted containers derive a 256-bit key from the
operator's password with PBKDF2-HMAC-SHA256 and store every block as
``nonce || AES-256-GCM(data)``, using the block id as associated data.

The password is only requested through the callback given to
:meth:`Container.create` / :meth:`Container.open`, and only when the header
says the container is encrypted.
"""

import base64
import json
import logging
import os
import re
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from nutstool.constants import (
    CIPHER_AES256_GCM,
    CIPHER_NONE,
    CIPHERS,
    DEFAULT_KDF_ITERATIONS,
    DIR_MODE,
    FILE_MODE,
    KDF_NONE,
    KDF_PBKDF2_SHA256,
    MIN_KDF_ITERATIONS,
    TRACE_LEVEL,
)
from nutstool.errors import (
    ContainerError,
    ContainerExistsError,
    ContainerNotFoundError,
    HeaderError,
    PasswordError,
)
from nutstool.errors_catalog import actionable_error
from nutstool.services.credentials import PasswordCallback

logger = logging.getLogger("nutstool.container")

HEADER_FILE = "header.json"
BLOCK_DIR = "blocks"
REVISION = 1
NONCE_SIZE = 12
SALT_SIZE = 16
KEY_CHECK_PLAINTEXT = b"nuts-key-check"
KEY_CHECK_AAD = b"header"

_BLOCK_ID_RE = re.compile(r"[A-Za-z0-9_-][A-Za-z0-9._-]*")


@dataclass(frozen=True)
class DirectoryBackendOptions:
    """Binds a directory backend to the container directory."""

    path: Path


class DirectoryBackend:
    """Raw header and block storage inside one directory."""

    def __init__(self, options: DirectoryBackendOptions):
        self.path = Path(options.path)
        self.header_path = self.path / HEADER_FILE
        self.block_dir = self.path / BLOCK_DIR

    def exists(self) -> bool:
        return self.header_path.is_file()

    def check_available(self):
        try:
            occupied = self.path.exists() and (not self.path.is_dir() or any(self.path.iterdir()))
        except OSError as exc:
            raise ContainerError(f"Could not inspect {self.path}: {exc}") from exc

        if occupied:
            raise ContainerExistsError(
                actionable_error("container_exists", path=str(self.path), name=self.path.name)
            )

    def initialize(self):
        self.check_available()
        try:
            self.path.mkdir(mode=DIR_MODE, exist_ok=True)
            self.block_dir.mkdir(mode=DIR_MODE, exist_ok=True)
        except OSError as exc:
            raise ContainerError(f"Could not initialize storage at {self.path}: {exc}") from exc

    def read_header(self) -> Dict[str, Any]:
        if not self.exists():
            raise ContainerNotFoundError(
                actionable_error("container_not_found", path=str(self.path), name=self.path.name)
            )

        try:
            data = json.loads(self.header_path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ContainerError(f"Could not read header {self.header_path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise HeaderError(f"Corrupt header {self.header_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise HeaderError(f"Corrupt header {self.header_path}: not a JSON object.")
        return data

    def write_header(self, header: Dict[str, Any]):
        payload = json.dumps(header, indent=2, sort_keys=True) + "\n"
        self._atomic_write(self.header_path, payload.encode("utf-8"))

    def block_path(self, block_id: str) -> Path:
        if not _BLOCK_ID_RE.fullmatch(block_id):
            raise ContainerError(f"Invalid block id: {block_id!r}")
        return self.block_dir / block_id

    def read_block(self, block_id: str) -> bytes:
        path = self.block_path(block_id)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise ContainerError(f"No such block: {block_id}") from exc
        except OSError as exc:
            raise ContainerError(f"Could not read block {block_id}: {exc}") from exc

    def write_block(self, block_id: str, data: bytes):
        self._atomic_write(self.block_path(block_id), data)

    def delete_block(self, block_id: str):
        try:
            self.block_path(block_id).unlink()
        except FileNotFoundError as exc:
            raise ContainerError(f"No such block: {block_id}") from exc
        except OSError as exc:
            raise ContainerError(f"Could not delete block {block_id}: {exc}") from exc

    def block_ids(self) -> List[str]:
        if not self.block_dir.is_dir():
            return []
        return sorted(path.name for path in self.block_dir.iterdir() if path.is_file())

    def _atomic_write(self, target: Path, data: bytes):
        fd, temp_path = tempfile.mkstemp(prefix=".tmp-", dir=str(target.parent))
        try:
            with os.fdopen(fd, "wb") as file_obj:
                file_obj.write(data)
            os.chmod(temp_path, FILE_MODE)
            os.replace(temp_path, target)
        except OSError as exc:
            raise ContainerError(f"Could not write {target}: {exc}") from exc
        finally:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(value: Any, field: str) -> bytes:
    if not isinstance(value, str):
        raise HeaderError(f"Corrupt header: `{field}` is missing.")
    try:
        return base64.b64decode(value, validate=True)
    except ValueError as exc:
        raise HeaderError(f"Corrupt header: `{field}` is not valid base64.") from exc


def _derive_key(password: bytes, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password)


def _ask(password_callback: Optional[PasswordCallback]) -> bytes:
    if password_callback is None:
        raise PasswordError("A password is required but no password callback was given.")
    return password_callback()


class Container:
    """An opened container bound to a :class:`DirectoryBackend`."""

    def __init__(self, backend: DirectoryBackend, header: Dict[str, Any], key: Optional[bytes]):
        self.backend = backend
        self.header = header
        self._aead = AESGCM(key) if key is not None else None

    @property
    def path(self) -> Path:
        return self.backend.path

    @property
    def cipher(self) -> str:
        return self.header["cipher"]

    @classmethod
    def create(
        cls,
        options: DirectoryBackendOptions,
        cipher: str = CIPHER_AES256_GCM,
        kdf_iterations: int = DEFAULT_KDF_ITERATIONS,
        password_callback: Optional[PasswordCallback] = None,
    ) -> "Container":
        if cipher not in CIPHERS:
            raise ContainerError(f"Unsupported cipher: {cipher}")

        backend = DirectoryBackend(options)
        header: Dict[str, Any] = {
            "revision": REVISION,
            "cipher": cipher,
            "kdf": KDF_NONE,
            "kdf_iterations": None,
            "salt": None,
            "key_check": None,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

        backend.check_available()
        key = None
        if cipher != CIPHER_NONE:
            if kdf_iterations < MIN_KDF_ITERATIONS:
                raise ContainerError(f"kdf iterations must be at least {MIN_KDF_ITERATIONS}.")
            salt = os.urandom(SALT_SIZE)
            key = _derive_key(_ask(password_callback), salt, kdf_iterations)
            nonce = os.urandom(NONCE_SIZE)
            key_check = AESGCM(key).encrypt(nonce, KEY_CHECK_PLAINTEXT, KEY_CHECK_AAD)
            header.update(
                {
                    "kdf": KDF_PBKDF2_SHA256,
                    "kdf_iterations": kdf_iterations,
                    "salt": _b64encode(salt),
                    "key_check": _b64encode(nonce + key_check),
                }
            )

        backend.initialize()
        backend.write_header(header)
        logger.debug("created container at %s (cipher %s)", backend.path, cipher)
        return cls(backend, header, key)

    @classmethod
    def open(
        cls,
        options: DirectoryBackendOptions,
        password_callback: Optional[PasswordCallback] = None,
    ) -> "Container":
        backend = DirectoryBackend(options)
        header = backend.read_header()

        if header.get("revision") != REVISION:
            raise HeaderError(f"Unsupported container revision: {header.get('revision')!r}")

        cipher = header.get("cipher")
        if cipher == CIPHER_NONE:
            logger.debug("opened unencrypted container at %s", backend.path)
            return cls(backend, header, None)
        if cipher != CIPHER_AES256_GCM:
            raise HeaderError(f"Unsupported cipher in header: {cipher!r}")
        if header.get("kdf") != KDF_PBKDF2_SHA256:
            raise HeaderError(f"Unsupported kdf in header: {header.get('kdf')!r}")

        iterations = header.get("kdf_iterations")
        if not isinstance(iterations, int) or iterations < 1:
            raise HeaderError("Corrupt header: `kdf_iterations` is invalid.")
        salt = _b64decode(header.get("salt"), "salt")
        key_check = _b64decode(header.get("key_check"), "key_check")
        if len(key_check) <= NONCE_SIZE:
            raise HeaderError("Corrupt header: `key_check` is too short.")

        key = _derive_key(_ask(password_callback), salt, iterations)
        try:
            AESGCM(key).decrypt(key_check[:NONCE_SIZE], key_check[NONCE_SIZE:], KEY_CHECK_AAD)
        except InvalidTag as exc:
            raise PasswordError(actionable_error("wrong_password")) from exc

        logger.debug("opened encrypted container at %s", backend.path)
        return cls(backend, header, key)

    def read(self, block_id: str) -> bytes:
        data = self.backend.read_block(block_id)
        if self._aead is None:
            return data
        if len(data) <= NONCE_SIZE:
            raise ContainerError(f"Block {block_id} is truncated.")

        try:
            return self._aead.decrypt(data[:NONCE_SIZE], data[NONCE_SIZE:], block_id.encode("utf-8"))
        except InvalidTag as exc:
            raise ContainerError(f"Block {block_id} failed the integrity check.") from exc

    def write(self, block_id: str, data: bytes):
        if self._aead is not None:
            nonce = os.urandom(NONCE_SIZE)
            data = nonce + self._aead.encrypt(nonce, data, block_id.encode("utf-8"))
        self.backend.write_block(block_id, data)
        logger.log(TRACE_LEVEL, "wrote block %s (%d bytes)", block_id, len(data))

    def delete(self, block_id: str):
        self.backend.delete_block(block_id)

    def exists(self, block_id: str) -> bool:
        return self.backend.block_path(block_id).is_file()

    def block_ids(self) -> List[str]:
        return self.backend.block_ids()

    def info(self) -> Dict[str, Any]:
        return {
            "path": str(self.path),
            "revision": self.header.get("revision"),
            "cipher": self.header.get("cipher"),
            "kdf": self.header.get("kdf"),
            "kdf_iterations": self.header.get("kdf_iterations"),
            "created_at": self.header.get("created_at"),
            "blocks": len(self.block_ids()),
        }
