"""Core module."""

from .commands import Command, Pause, Play, PlayLoop, Resume, Stop
from .channel import CommandReceiver, CommandSender, open_channel

__all__ = [
    "Command",
    "Play",
    "PlayLoop",
    "Pause",
    "Resume",
    "Stop",
    "CommandSender",
    "CommandReceiver",
    "open_channel",
]
