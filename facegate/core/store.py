"""Persistence of the registered face profile.

The profile lives in a small key-value document on disk. It is written as a
fixed-width binary record of four little-endian float64 values in the order
[left, top, width, height]; profiles saved in the older string-list format are
migrated on first load.
"""

import base64
import binascii
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import numpy as np

from .errors import StorageError
from ..models.types import FaceProfile

logger = logging.getLogger(__name__)

PROFILE_KEY = "face_profile"
LEGACY_PROFILE_KEY = "face_data"
RECORD_DTYPE = np.dtype("<f8")
RECORD_FIELDS = len(FaceProfile._fields)


class KeyValueStore:
    """File-backed key-value document.

    Values are lists of strings or raw bytes (kept base64-encoded in the
    document). Each write replaces the whole file atomically.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> Dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Unexpected document in {self.path}")
        return data

    def _write(self, data: Dict[str, object]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    def get_list(self, key: str) -> Optional[List[str]]:
        value = self._read().get(key)
        if value is None:
            return None
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise StorageError(f"Value under '{key}' is not a list of strings")
        return value

    def set_list(self, key: str, values: Sequence[str]) -> None:
        data = self._read()
        data[key] = [str(v) for v in values]
        self._write(data)

    def get_bytes(self, key: str) -> Optional[bytes]:
        value = self._read().get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise StorageError(f"Value under '{key}' is not a binary record")
        try:
            return base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise StorageError(f"Value under '{key}' is not valid base64: {e}") from e

    def set_bytes(self, key: str, payload: bytes) -> None:
        data = self._read()
        data[key] = base64.b64encode(payload).decode("ascii")
        self._write(data)

    def remove(self, key: str) -> bool:
        data = self._read()
        if key not in data:
            return False
        del data[key]
        self._write(data)
        return True


def check_profile(profile: FaceProfile) -> None:
    """Reject profiles that could not be read back.

    Raises:
        ValueError: If a value is non-finite or the width or height is negative.
    """
    values = np.asarray(profile, dtype=RECORD_DTYPE)
    if values.shape != (RECORD_FIELDS,):
        raise ValueError(f"Profile must hold {RECORD_FIELDS} values, got {values.size}")
    if not np.all(np.isfinite(values)):
        raise ValueError(f"Profile holds non-finite values: {tuple(profile)}")
    if profile.width < 0 or profile.height < 0:
        raise ValueError(f"Profile size must be non-negative, got {profile.width}x{profile.height}")


def encode_profile(profile: FaceProfile) -> bytes:
    """Pack a profile into its 32-byte record.

    Raises:
        ValueError: If the profile fails check_profile().
    """
    check_profile(profile)
    return np.asarray(profile, dtype=RECORD_DTYPE).tobytes()


def decode_profile(payload: bytes) -> FaceProfile:
    """Unpack a 32-byte record into a profile.

    Raises:
        StorageError: If the record has the wrong size or holds values
            check_profile() rejects.
    """
    expected = RECORD_FIELDS * RECORD_DTYPE.itemsize
    if len(payload) != expected:
        raise StorageError(f"Profile record must be {expected} bytes, got {len(payload)}")
    profile = FaceProfile(*(float(v) for v in np.frombuffer(payload, dtype=RECORD_DTYPE)))
    try:
        check_profile(profile)
    except ValueError as e:
        raise StorageError(f"Invalid profile record: {e}") from e
    return profile


class ProfileStore:
    """Reads and writes the single registered face profile."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def load(self) -> Optional[FaceProfile]:
        payload = self.kv.get_bytes(PROFILE_KEY)
        if payload is not None:
            return decode_profile(payload)

        legacy = self.kv.get_list(LEGACY_PROFILE_KEY)
        if not legacy:
            return None
        return self._migrate(legacy)

    def save(self, profile: FaceProfile) -> None:
        self.kv.set_bytes(PROFILE_KEY, encode_profile(profile))
        logger.info(f"Stored face profile {tuple(profile)}")

    def clear(self) -> bool:
        removed = self.kv.remove(PROFILE_KEY)
        removed = self.kv.remove(LEGACY_PROFILE_KEY) or removed
        return removed

    def _migrate(self, values: List[str]) -> FaceProfile:
        if len(values) != RECORD_FIELDS:
            raise StorageError(
                f"Legacy profile must hold {RECORD_FIELDS} values, got {len(values)}"
            )
        try:
            parsed = [float(v) for v in values]
        except ValueError as e:
            raise StorageError(f"Legacy profile is not numeric: {e}") from e

        profile = FaceProfile(*parsed)
        try:
            check_profile(profile)
        except ValueError as e:
            raise StorageError(f"Invalid legacy profile: {e}") from e
        self.save(profile)
        self.kv.remove(LEGACY_PROFILE_KEY)
        logger.info("Migrated legacy face profile to binary record")
        return profile
