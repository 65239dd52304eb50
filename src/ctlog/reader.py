import io
from typing import BinaryIO, Union

from .constants import MAX_NUMBER_LENGTH
from .errors import CorruptDataError, DeserializationError, InvalidArgumentError, TruncatedInputError

ByteSource = Union[BinaryIO, bytes, bytearray, memoryview]


def as_stream(source: ByteSource) -> BinaryIO:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(source))
    return source


def bytes_needed(max_data_length: int) -> int:
    """
    Return the number of bytes needed to hold any value in [0, max_data_length].

    Computed from the bit length so that exact powers of two (256 needs 2 bytes, 65536 needs 3)
    never depend on floating point rounding.
    """
    if max_data_length < 0:
        raise InvalidArgumentError("Maximum data length cannot be negative: {}".format(max_data_length))
    return (max_data_length.bit_length() + 7) // 8


def _read(source: BinaryIO, length: int) -> bytes:
    # Raw streams may return short reads before the end of the stream, so keep going until EOF.
    chunks = []
    remaining = length
    try:
        while remaining > 0:
            chunk = source.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
    except OSError as e:
        raise DeserializationError("Error while reading {} bytes".format(length)) from e
    return b"".join(chunks)


def _read_all(source: BinaryIO) -> bytes:
    try:
        return source.read() or b""
    except OSError as e:
        raise DeserializationError("Error while reading trailing data") from e


def read_fixed_length(source: BinaryIO, data_length: int) -> bytes:
    data = _read(source, data_length)
    if len(data) < data_length:
        raise TruncatedInputError("Not enough bytes", data_length, len(data))
    return data


def read_number(source: BinaryIO, num_bytes: int) -> int:
    """Read an unsigned number of exactly num_bytes bytes, most significant byte first."""
    if num_bytes < 0 or num_bytes > MAX_NUMBER_LENGTH:
        raise InvalidArgumentError(
            "Could not read a number of {} bytes; at most {} are supported.".format(num_bytes, MAX_NUMBER_LENGTH))

    value = 0
    for i in range(num_bytes):
        byte = _read(source, 1)
        if len(byte) == 0:
            raise TruncatedInputError("Missing length bytes", num_bytes, i)
        value = (value << 8) | byte[0]
    return value


def read_variable_length(source: BinaryIO, max_data_length: int) -> bytes:
    """
    Read a length-prefixed byte array. The width of the length prefix is the number of bytes needed
    to represent max_data_length.
    """
    data_length = read_number(source, bytes_needed(max_data_length))
    if data_length > max_data_length:
        raise CorruptDataError("Declared length {} exceeds maximum of {}".format(data_length, max_data_length))

    data = _read(source, data_length)
    if len(data) != data_length:
        raise TruncatedInputError("Incomplete data", data_length, len(data))
    return data


def read_exact_remainder(source: BinaryIO, declared_length: int) -> io.BytesIO:
    """
    Read declared_length bytes and require the source to be exhausted afterwards.

    The returned stream holds exactly the declared region.
    """
    data = _read(source, declared_length)
    if len(data) != declared_length:
        raise CorruptDataError("Extra data corrupted", declared_length, len(data))
    trailing = _read_all(source)
    if trailing:
        raise CorruptDataError("Extra data corrupted", declared_length, declared_length + len(trailing))
    return io.BytesIO(data)


def is_exhausted(stream: io.BytesIO) -> bool:
    return stream.tell() >= len(stream.getbuffer())
