from enum import Enum

from pydantic import BaseModel


class BasePydanticModel(BaseModel):
    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "use_enum_values": True,
    }


class Transport(str, Enum):
    UDP = "udp"
    TCP = "tcp"


class EncryptionType(str, Enum):
    RSA = "RSA"
    AUTH_SETUP = "auth_setup"
    NONE = "none"


class AudioCodec(str, Enum):
    PCM = "PCM"
    ALAC = "ALAC"
    AAC = "AAC"
    AAC_ELD = "AAC-ELD"
