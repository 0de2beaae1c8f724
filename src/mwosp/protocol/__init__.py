"""MWOSP-v1 wire protocol: command models and the line codec."""

from mwosp.protocol.codec import ProtocolError, decode, encode, encode_command, parse_int
from mwosp.protocol.commands import InboundCommand, OutboundCommand, command

__all__ = [
    "InboundCommand",
    "OutboundCommand",
    "ProtocolError",
    "command",
    "decode",
    "encode",
    "encode_command",
    "parse_int",
]
