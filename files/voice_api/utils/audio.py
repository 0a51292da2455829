import base64
from dataclasses import dataclass

HEADER_WINDOW = 100
ENCODER_TAG = "Lavf"  # ffmpeg/libavformat muxer tag
ID3_SIGNATURE = "ID3"


@dataclass(frozen=True)
class HeaderFeatures:
    has_encoder_tag: bool
    has_id3: bool
    size: int


def decode_base64_audio(b64: str) -> bytes:
    # accept data URLs as well as bare base64
    header_cut = b64.find("base64,")
    if header_cut != -1:
        b64 = b64[header_cut + len("base64,"):]
    return base64.b64decode(b64)


def extract_header_features(data: bytes) -> HeaderFeatures:
    """
    Structural features of the raw buffer used by the heuristic model.
    Only the first HEADER_WINDOW bytes are inspected for tags; bytes outside
    the ASCII range never match.
    """
    header = data[:HEADER_WINDOW].decode("ascii", errors="replace")
    return HeaderFeatures(
        has_encoder_tag=ENCODER_TAG in header,
        has_id3=header.startswith(ID3_SIGNATURE),
        size=len(data),
    )
