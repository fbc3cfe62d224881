"""Audio container synthesis and playback primitives."""

from .wav import wrap_pcm, WAV_HEADER_SIZE
from .player import AbstractMediaPlayer, MediaPlayerError

__all__ = [
    'wrap_pcm',
    'WAV_HEADER_SIZE',
    'AbstractMediaPlayer',
    'MediaPlayerError',
]
