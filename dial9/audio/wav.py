"""RIFF/WAVE container synthesis for raw PCM payloads."""

import struct

DEFAULT_SAMPLE_RATE = 8000
DEFAULT_CHANNELS = 1
DEFAULT_BITS_PER_SAMPLE = 16
WAV_HEADER_SIZE = 44

# RIFF chunk, "fmt " subchunk, "data" subchunk header; all little-endian
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")
_FMT_CHUNK_SIZE = 16
_FORMAT_PCM = 1


def wrap_pcm(pcm: bytes,
             sample_rate: int = DEFAULT_SAMPLE_RATE,
             channels: int = DEFAULT_CHANNELS,
             bits_per_sample: int = DEFAULT_BITS_PER_SAMPLE) -> bytes:
    """Prefix raw PCM samples with a canonical 44-byte WAV header.

    The samples are not touched; an empty buffer still yields a valid
    zero-length file.

    Args:
        pcm: Headerless linear PCM bytes
        sample_rate: Samples per second per channel
        channels: Number of interleaved channels
        bits_per_sample: Sample width in bits

    Returns:
        Bytes of a playable .wav file
    """
    data_size = len(pcm)
    byte_rate = sample_rate * channels * bits_per_sample // 8
    block_align = channels * bits_per_sample // 8

    header = _HEADER.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        _FMT_CHUNK_SIZE,
        _FORMAT_PCM,
        channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        b"data",
        data_size,
    )
    return header + bytes(pcm)
