"""raop-resolved - discovers RAOP (AirPlay audio) receivers through systemd-resolved.

Advertisements are browsed over the resolver's D-Bus API instead of speaking
multicast DNS directly, and every unique endpoint gets one PipeWire raop-sink.
"""

__version__ = "0.1.0"

from .config import Config

__all__ = ["Config", "__version__"]
