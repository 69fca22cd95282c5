import logging
from typing import Any, BinaryIO, Dict, Iterator, Optional

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .config import DEFAULT_MAX_DEPTH, MAX_UPLOAD_SIZE, READ_CHUNK_SIZE
from .decoder import INT_MAX, INT_MIN, MAX_STRING_LENGTH, decode, expect_end
from .errors import DecodeError
from .parser import Parser
from .render import to_jsonable

logger = logging.getLogger(__name__)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class UploadTooLarge(Exception):
    """raised while streaming an upload once it passes the size limit"""


class DecodeResponse(BaseModel):
    """decode endpoint model"""
    value: Any
    consumed: int  # bytes read to decode the value
    max_depth: int


class LimitsResponse(BaseModel):
    """limits endpoint model"""
    default_max_depth: int
    int_min: int
    int_max: int
    max_string_length: int
    max_upload_size: int


def limited_chunks(fp: BinaryIO, limit: int, chunk_size: int = READ_CHUNK_SIZE) -> Iterator[bytes]:
    """
    reads fp in chunks, refusing to go past limit bytes

    Args:
        fp: binary file object to read
        limit: maximum number of bytes allowed
        chunk_size: bytes per read

    Yields:
        chunks of fp

    Raises:
        UploadTooLarge: once more than limit bytes have been read
    """
    total = 0
    while True:
        chunk = fp.read(chunk_size)
        if not chunk:
            return
        total += len(chunk)
        if total > limit:
            raise UploadTooLarge(f"upload larger than {limit} bytes")
        yield chunk


def error_detail(error: DecodeError) -> Dict[str, Any]:
    return {
        "error": type(error).__name__,
        "message": error.message,
        "position": error.position,
    }


@app.post("/decode", response_model=DecodeResponse)
def decode_upload(file: UploadFile = File(...),
                  max_depth: Optional[int] = Query(None, ge=0),
                  strict: bool = True):
    """
    decodes an uploaded bencoded file, e.g. a .torrent

    Args:
        file: the uploaded file, streamed into the parser
        max_depth: nesting limit, server default if missing
        strict: reject bytes after the first value

    Returns:
        the decoded value rendered as json, and how many bytes it took
    """
    effective_depth = DEFAULT_MAX_DEPTH if max_depth is None else max_depth
    parser = Parser(limited_chunks(file.file, MAX_UPLOAD_SIZE))

    try:
        value = decode(parser, effective_depth)
        if strict:
            expect_end(parser)
    except UploadTooLarge as e:
        logger.warning("[decode] %s rejected: %s", file.filename, e)
        raise HTTPException(413, str(e)) from e
    except DecodeError as e:
        logger.warning("[decode] %s failed: %s", file.filename, e)
        raise HTTPException(400, error_detail(e)) from e

    logger.info("[decode] %s decoded (%d bytes)", file.filename, parser.position)
    return DecodeResponse(value=to_jsonable(value), consumed=parser.position, max_depth=effective_depth)


@app.get("/limits", response_model=LimitsResponse)
def get_limits():
    """returns the limits the decoder enforces"""
    return LimitsResponse(
        default_max_depth=DEFAULT_MAX_DEPTH,
        int_min=INT_MIN,
        int_max=INT_MAX,
        max_string_length=MAX_STRING_LENGTH,
        max_upload_size=MAX_UPLOAD_SIZE,
    )
