"""Reel, header and sidecar handlers for the metadata extractor."""

from .aud import AudHeaderHandler, decode_aud_header, encode_aud_header, generic_trailers_header
from .base import ReelHandler
from .hdr import HdrHeaderHandler, decode_hdr
from .sidecar import TrailerSidecarHandler, decode_trailer_sidecar, encode_trailer_sidecar

__all__ = [
    "ReelHandler",
    "AudHeaderHandler",
    "HdrHeaderHandler",
    "TrailerSidecarHandler",
    "decode_aud_header",
    "encode_aud_header",
    "generic_trailers_header",
    "decode_hdr",
    "decode_trailer_sidecar",
    "encode_trailer_sidecar",
]
