import zlib
from typing import AsyncIterable, List

from .errors import BodyTooLargeError, DecodeError


def _gzip_member():
    return zlib.decompressobj(16 + zlib.MAX_WBITS)


async def read_body(chunks: AsyncIterable[bytes], *, gzip_encoded: bool, max_bytes: int) -> List[bytes]:
    """Collect a request body, inflating it when it is gzip-encoded.

    ``max_bytes`` bounds both the bytes received and the bytes produced by
    decompression. Concatenated gzip members are inflated one after the
    other; anything after a member that is not another member is an error.
    """
    inflater = _gzip_member() if gzip_encoded else None
    received = 0
    produced = 0
    out: List[bytes] = []

    async for chunk in chunks:
        if not chunk:
            continue
        received += len(chunk)
        if received > max_bytes:
            raise BodyTooLargeError(max_bytes)
        if inflater is None:
            out.append(chunk)
            continue

        pending = chunk
        while pending:
            if inflater.eof:
                inflater = _gzip_member()
            try:
                data = inflater.decompress(pending, max_bytes - produced + 1)
            except zlib.error as exc:
                raise DecodeError(f"Invalid gzip body: {exc}") from exc
            produced += len(data)
            if produced > max_bytes:
                raise BodyTooLargeError(max_bytes)
            out.append(data)
            # bytes past the end of this member start the next one
            pending = inflater.unused_data if inflater.eof else b""

    if inflater is not None and received:
        if not inflater.eof:
            try:
                tail = inflater.flush()
            except zlib.error as exc:
                raise DecodeError(f"Invalid gzip body: {exc}") from exc
            if produced + len(tail) > max_bytes:
                raise BodyTooLargeError(max_bytes)
            out.append(tail)
        if not inflater.eof:
            raise DecodeError("Truncated gzip body")
    return out
