"""
Pure content transforms used by the file operations.

NOTE: the cipher here is a reversible XOR/Base64 obfuscation, not encryption.
Do not use it to protect anything.
"""

import base64
import binascii
import math
from itertools import cycle
from typing import List

from .constants import COMPRESSION_RATIO, DECOMPRESSION_RATIO
from .errors import TransformFailure
from .types import FileKind

_EXTENSION_KINDS = {
    "pdf": FileKind.PDF,
    **dict.fromkeys(["jpg", "jpeg", "png", "gif", "bmp", "webp"], FileKind.IMAGE),
    **dict.fromkeys(["mp4", "webm", "avi", "mov"], FileKind.VIDEO),
    **dict.fromkeys(["mp3", "wav", "ogg"], FileKind.AUDIO),
    **dict.fromkeys(["zip", "rar", "tar", "gz"], FileKind.ARCHIVE),
    **dict.fromkeys(
        ["js", "ts", "html", "css", "jsx", "tsx", "py", "java", "c", "cpp"],
        FileKind.CODE,
    ),
    **dict.fromkeys(["doc", "docx", "txt", "md"], FileKind.DOCUMENT),
}

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]


def kind_from_name(filename: str) -> FileKind:
    """Guess the record kind from the file name extension."""
    if "." not in filename:
        return FileKind.UNKNOWN
    extension = filename.rsplit(".", 1)[1].lower()
    return _EXTENSION_KINDS.get(extension, FileKind.UNKNOWN)


def _xor(data: bytes, key: bytes) -> bytes:
    return bytes(b ^ k for b, k in zip(data, cycle(key)))


def encrypt(content: str, passphrase: str) -> str:
    """XOR the UTF-8 bytes of ``content`` with the repeating passphrase and Base64 the result."""
    if not content:
        return ""
    if not passphrase:
        raise ValueError("Passphrase must not be empty")

    scrambled = _xor(content.encode("utf-8"), passphrase.encode("utf-8"))
    return base64.b64encode(scrambled).decode("ascii")


def decrypt(encrypted: str, passphrase: str) -> str:
    """Reverse ``encrypt``.

    Raises:
        TransformFailure: If the payload is not valid Base64 or the
            passphrase does not reverse it into valid text
    """
    if not encrypted:
        return ""
    if not passphrase:
        raise ValueError("Passphrase must not be empty")

    try:
        decoded = base64.b64decode(encrypted, validate=True)
    except (binascii.Error, ValueError):
        raise TransformFailure("Incorrect password or corrupted file.")

    try:
        return _xor(decoded, passphrase.encode("utf-8")).decode("utf-8")
    except UnicodeDecodeError:
        raise TransformFailure("Incorrect password or corrupted file.")


def compressed_size(size: int) -> int:
    return math.ceil(size * COMPRESSION_RATIO)


def decompressed_size(size: int) -> int:
    return math.ceil(size * DECOMPRESSION_RATIO)


def sort_lines(content: str) -> str:
    return "\n".join(sorted(content.split("\n")))


def search_lines(content: str, query: str) -> List[str]:
    """Return ``"Line N: <line>"`` for each 1-based line containing ``query``, ignoring case."""
    if not content:
        return []
    needle = query.lower()
    return [
        f"Line {number}: {line}"
        for number, line in enumerate(content.split("\n"), start=1)
        if needle in line.lower()
    ]


def simple_hash(text: str) -> str:
    """Non-cryptographic 32-bit string hash, rendered as hex."""
    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value & 0x80000000:
        value -= 1 << 32
    return format(abs(value), "x")


def format_file_size(num_bytes: int) -> str:
    if num_bytes <= 0:
        return "0 Bytes"
    exponent = 0
    while num_bytes >= 1024 ** (exponent + 1) and exponent < len(_SIZE_UNITS) - 1:
        exponent += 1
    value = round(num_bytes / 1024**exponent, 2)
    return f"{value:g} {_SIZE_UNITS[exponent]}"
