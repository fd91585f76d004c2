"""
Windows DPAPI access through ctypes.

Wraps ``crypt32!CryptUnprotectData`` for the current user. Only importable
functionality is defined here; the Windows libraries are loaded on first call
so the module can be imported on any platform.
"""

from __future__ import annotations

import ctypes
import sys

CRYPTPROTECT_UI_FORBIDDEN = 0x01


class _DataBlob(ctypes.Structure):
    _fields_ = [
        ("cbData", ctypes.c_uint32),
        ("pbData", ctypes.POINTER(ctypes.c_char)),
    ]


def _blob(data: bytes) -> _DataBlob:
    buffer = ctypes.create_string_buffer(data, len(data))
    return _DataBlob(len(data), ctypes.cast(buffer, ctypes.POINTER(ctypes.c_char)))


def crypt_unprotect_data(ciphertext: bytes) -> bytes:
    """
    Decrypt a DPAPI blob with the current user's credentials.

    Raises:
        OSError: Not on Windows, or CryptUnprotectData failed
    """
    if sys.platform != "win32":
        raise OSError("DPAPI is only available on Windows")

    crypt32 = ctypes.windll.crypt32
    kernel32 = ctypes.windll.kernel32

    blob_in = _blob(ciphertext)
    blob_out = _DataBlob()
    if not crypt32.CryptUnprotectData(
        ctypes.byref(blob_in),
        None,
        None,
        None,
        None,
        CRYPTPROTECT_UI_FORBIDDEN,
        ctypes.byref(blob_out),
    ):
        raise ctypes.WinError()

    try:
        return ctypes.string_at(blob_out.pbData, blob_out.cbData)
    finally:
        kernel32.LocalFree(blob_out.pbData)
