"""
Unit tests for TXT record decoding and sink property composition.
"""
import ipaddress

import pytest
from structlog.testing import capture_logs

from raop_resolved.discovery.endpoints import DiscoveredEndpoint, SocketAddress
from raop_resolved.models.common import AudioCodec, EncryptionType, Transport
from raop_resolved.models.sink import UNNAMED, SinkProperties
from raop_resolved.tunnels.properties import (
    build_sink_properties,
    list_contains,
    parse_audio_codec,
    parse_encryption_type,
    parse_transport,
    parse_txt_properties,
    serialize_module_args,
)


def _endpoint(ip, txt, port=7000, scope_id=None):
    return DiscoveredEndpoint("kitchen.local", SocketAddress(ipaddress.ip_address(ip), port, scope_id), tuple(txt))


def test_list_contains_is_exact():
    assert list_contains("0,1,2", "1")
    assert not list_contains("10,11", "1")
    assert not list_contains("", "1")


def test_full_txt_set():
    props = parse_txt_properties(["tp=TCP", "et=1", "cn=2", "am=Kitchen"])
    assert props.transport == Transport.TCP
    assert props.encryption_type == EncryptionType.RSA
    assert props.audio_codec == AudioCodec.AAC
    assert props.display_name == "Kitchen"


def test_defaults_without_records():
    props = parse_txt_properties([])
    assert props.display_name == UNNAMED
    assert props.transport is None
    assert props.encryption_type is None
    assert props.audio_codec is None


@pytest.mark.parametrize("value, expected", [
    ("UDP", Transport.UDP),
    ("TCP,UDP", Transport.UDP),
    ("TCP", Transport.TCP),
])
def test_transport_preference(value, expected):
    assert parse_transport(value) == expected


@pytest.mark.parametrize("value, expected", [
    ("0,1", EncryptionType.RSA),
    ("4,1", EncryptionType.RSA),
    ("0,4", EncryptionType.AUTH_SETUP),
    ("0", EncryptionType.NONE),
])
def test_encryption_preference(value, expected):
    assert parse_encryption_type(value) == expected


@pytest.mark.parametrize("value, expected", [
    ("0,1,2,3", AudioCodec.AAC_ELD),
    ("0,1,2", AudioCodec.AAC),
    ("1", AudioCodec.ALAC),
    ("0", AudioCodec.PCM),
])
def test_codec_preference(value, expected):
    assert parse_audio_codec(value) == expected


def test_unknown_codec_is_unset_and_logged():
    with capture_logs() as logs:
        props = parse_txt_properties(["cn=99"])
    assert props.audio_codec is None
    assert logs == [{"event": "unknown codec", "log_level": "warning", "value": "99"}]


def test_unknown_transport_is_unset_and_logged():
    with capture_logs() as logs:
        props = parse_txt_properties(["tp=SCTP"])
    assert props.transport is None
    assert logs[0]["event"] == "unknown transport"


def test_unknown_encryption_becomes_none():
    with capture_logs() as logs:
        props = parse_txt_properties(["et=3"])
    assert props.encryption_type == EncryptionType.NONE
    assert logs[0]["event"] == "unknown encryption type"


def test_first_record_with_value_wins():
    props = parse_txt_properties(["am=First", "am=Second", "cn=9", "cn=1", "cn=0"])
    assert props.display_name == "First"
    assert props.audio_codec == AudioCodec.ALAC


def test_unrelated_records_ignored():
    props = parse_txt_properties(["txtvers=1", "vs=366.0", "pk=abcdef", "am=Den"])
    assert props.display_name == "Den"


def test_ipv4_name_gets_suffix():
    props = build_sink_properties(_endpoint("192.168.1.20", ["am=Kitchen", "tp=UDP"]))
    assert props.name == "Kitchen (IPv4)"
    assert props.ip == "192.168.1.20"
    assert props.ip_version == "4"
    assert props.port == 7000
    assert props.hostname == "kitchen.local"


def test_ipv6_name_has_no_suffix():
    props = build_sink_properties(_endpoint("fe80::1", ["am=Kitchen"], scope_id=3))
    assert props.name == "Kitchen"
    assert props.ip == "fe80::1"
    assert props.ip_version == "6"


def test_unnamed_ipv4():
    assert build_sink_properties(_endpoint("10.0.0.5", [])).name == "<unnamed> (IPv4)"


def test_module_args_include_only_set_keys():
    props = build_sink_properties(_endpoint("10.0.0.5", ["am=Den", "cn=0"]))
    assert props.to_module_args() == {
        "raop.ip": "10.0.0.5",
        "raop.ip.version": "4",
        "raop.port": "7000",
        "raop.name": "Den (IPv4)",
        "raop.hostname": "kitchen.local",
        "raop.audio.codec": "PCM",
    }


def test_module_args_full():
    props = build_sink_properties(_endpoint("10.0.0.5", ["tp=TCP", "et=4", "cn=3"]))
    args = props.to_module_args()
    assert args["raop.transport"] == "tcp"
    assert args["raop.encryption.type"] == "auth_setup"
    assert args["raop.audio.codec"] == "AAC-ELD"


def test_sink_properties_reject_bad_port():
    with pytest.raises(ValueError):
        SinkProperties(ip="10.0.0.5", ip_version="4", port=70000, name="x", hostname="x.local")


def test_serialize_module_args():
    text = serialize_module_args({"raop.name": 'Living "Room"', "raop.port": "7000"})
    assert text == '{ "raop.name": "Living \\"Room\\"", "raop.port": "7000" }'


def test_serialize_empty_args():
    assert serialize_module_args({}) == "{ }"
