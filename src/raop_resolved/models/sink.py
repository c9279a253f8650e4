from typing import Literal, Optional

from pydantic import Field

from .common import AudioCodec, BasePydanticModel, EncryptionType, Transport

UNNAMED = "<unnamed>"


class TxtProperties(BasePydanticModel):
    """Structured view of an advertisement's TXT records."""
    display_name: str = Field(default=UNNAMED, description="Value of am= (device model / display name).")
    transport: Optional[Transport] = Field(default=None, description="From tp=; unset when neither UDP nor TCP is listed.")
    encryption_type: Optional[EncryptionType] = Field(default=None, description="From et=; unset when no et= record exists.")
    audio_codec: Optional[AudioCodec] = Field(default=None, description="From cn=; unset when no known codec is listed.")


class SinkProperties(BasePydanticModel):
    """Arguments of one raop-sink module instance."""
    ip: str
    ip_version: Literal["4", "6"]
    port: int = Field(..., ge=0, le=65535)
    name: str
    hostname: str
    transport: Optional[Transport] = None
    encryption_type: Optional[EncryptionType] = None
    audio_codec: Optional[AudioCodec] = None

    def to_module_args(self) -> dict[str, str]:
        """raop.* keys understood by the sink module; unset optional keys are left out."""
        args = {
            "raop.ip": self.ip,
            "raop.ip.version": self.ip_version,
            "raop.port": str(self.port),
            "raop.name": self.name,
            "raop.hostname": self.hostname,
        }
        optional = {
            "raop.transport": self.transport,
            "raop.encryption.type": self.encryption_type,
            "raop.audio.codec": self.audio_codec,
        }
        for key, value in optional.items():
            if value is not None:
                args[key] = str(value)
        return args
