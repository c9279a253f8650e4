"""
Discovery of RAOP receivers through systemd-resolved.

Record decoding, hysteretic presence tracking, endpoint resolution and the
event channel feeding the tunnel registry.
"""
from .channel import EventChannel
from .endpoints import DiscoveredEndpoint, EndpointResolver, SocketAddress, build_socket_address
from .presence import CandidateHost, PresenceChange, PresenceLoop, PresenceReconciler
from .records import ResourceRecord, parse_name, parse_rr

__all__ = [
    "CandidateHost",
    "DiscoveredEndpoint",
    "EndpointResolver",
    "EventChannel",
    "PresenceChange",
    "PresenceLoop",
    "PresenceReconciler",
    "ResourceRecord",
    "SocketAddress",
    "build_socket_address",
    "parse_name",
    "parse_rr",
]
