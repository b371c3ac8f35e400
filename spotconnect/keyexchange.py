"""Key-exchange handshake messages and their protobuf wire encoding."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import ClassVar, List, NamedTuple, Optional, Tuple, Type, Union

__all__ = [
    "Product",
    "Platform",
    "Cryptosuite",
    "Message",
    "LoginCryptoDiffieHellmanChallenge",
    "LoginCryptoChallengeUnion",
    "LoginCryptoDiffieHellmanHello",
    "LoginCryptoHelloUnion",
    "BuildInfo",
    "FeatureSet",
    "APChallenge",
    "APResponseMessage",
    "LoginCryptoDiffieHellmanResponse",
    "LoginCryptoResponseUnion",
    "CryptoResponseUnion",
    "PoWResponseUnion",
    "ClientResponsePlaintext",
    "ClientHello",
    "encode_varint",
    "decode_varint",
]

_WIRE_VARINT = 0
_WIRE_I64 = 1
_WIRE_LEN = 2
_WIRE_I32 = 5

_MAX_VARINT_BYTES = 10
_UINT32_MAX = 0xFFFFFFFF
_UINT64_MAX = 0xFFFFFFFFFFFFFFFF


class Product(enum.IntEnum):
    PRODUCT_CLIENT = 0
    PRODUCT_LIBSPOTIFY = 1
    PRODUCT_MOBILE = 2
    PRODUCT_PARTNER = 3
    PRODUCT_LIBSPOTIFY_EMBEDDED = 5


class Platform(enum.IntEnum):
    PLATFORM_WIN32_X86 = 0
    PLATFORM_OSX_X86 = 1
    PLATFORM_LINUX_X86 = 2
    PLATFORM_IPHONE_ARM = 3
    PLATFORM_S60_ARM = 4
    PLATFORM_OSX_PPC = 5
    PLATFORM_ANDROID_ARM = 6
    PLATFORM_WINDOWS_CE_ARM = 7
    PLATFORM_LINUX_X86_64 = 8
    PLATFORM_OSX_X86_64 = 9
    PLATFORM_PALM_ARM = 10
    PLATFORM_LINUX_SH = 11
    PLATFORM_FREEBSD_X86 = 12
    PLATFORM_FREEBSD_X86_64 = 13
    PLATFORM_BLACKBERRY_ARM = 14
    PLATFORM_SONOS = 15
    PLATFORM_LINUX_MIPS = 16
    PLATFORM_LINUX_ARM = 17
    PLATFORM_LOGITECH_ARM = 18
    PLATFORM_LINUX_BLACKFIN = 19
    PLATFORM_WP7_ARM = 20
    PLATFORM_ONKYO_ARM = 21
    PLATFORM_QNXNTO_ARM = 22
    PLATFORM_BCO_ARM = 23


class Cryptosuite(enum.IntEnum):
    CRYPTO_SUITE_SHANNON = 0
    CRYPTO_SUITE_RC4_SHA1_HMAC = 1


def encode_varint(value: int) -> bytes:
    """Encode a non-negative integer as a protobuf varint."""
    value = int(value)
    if value < 0:
        raise ValueError("varint must not be negative")
    if value > _UINT64_MAX:
        raise ValueError("varint exceeds 64 bits")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes, pos: int) -> Tuple[int, int]:
    """Decode a varint at ``pos``; return the value and the position after it."""
    value = 0
    shift = 0
    for count in range(_MAX_VARINT_BYTES):
        if pos >= len(data):
            raise ValueError("truncated varint")
        byte = data[pos]
        pos += 1
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value, pos
        shift += 7
    raise ValueError("varint is too long")


class _Kind(enum.Enum):
    BYTES = enum.auto()
    UINT32 = enum.auto()
    UINT64 = enum.auto()
    BOOL = enum.auto()
    ENUM = enum.auto()
    MESSAGE = enum.auto()
    PACKED_ENUM = enum.auto()


class _Spec(NamedTuple):
    tag: int
    name: str
    kind: _Kind
    type_: Optional[type] = None


def _key(tag: int, wire: int) -> bytes:
    return encode_varint((tag << 3) | wire)


def _length_delimited(tag: int, body: bytes) -> bytes:
    return _key(tag, _WIRE_LEN) + encode_varint(len(body)) + body


def _to_enum(enum_type: Type[enum.IntEnum], value: int) -> Union[enum.IntEnum, int]:
    try:
        return enum_type(value)
    except ValueError:
        return value


def _check_range(name: str, value: int, limit: int) -> int:
    value = int(value)
    if not 0 <= value <= limit:
        raise ValueError(f"field {name} out of range: {value}")
    return value


class Message:
    """Base of the handshake messages: fields are encoded in declared order."""

    _FIELDS: ClassVar[Tuple[_Spec, ...]] = ()

    def encode(self) -> bytes:
        """Serialise the message to protobuf wire format."""
        out = bytearray()
        for spec in self._FIELDS:
            value = getattr(self, spec.name)
            kind = spec.kind
            if kind is _Kind.BYTES:
                out += _length_delimited(spec.tag, bytes(value))
            elif kind is _Kind.UINT32:
                out += _key(spec.tag, _WIRE_VARINT)
                out += encode_varint(_check_range(spec.name, value, _UINT32_MAX))
            elif kind is _Kind.UINT64:
                out += _key(spec.tag, _WIRE_VARINT)
                out += encode_varint(_check_range(spec.name, value, _UINT64_MAX))
            elif kind is _Kind.BOOL:
                out += _key(spec.tag, _WIRE_VARINT) + encode_varint(1 if value else 0)
            elif kind is _Kind.ENUM:
                out += _key(spec.tag, _WIRE_VARINT)
                out += encode_varint(_check_range(spec.name, value, _UINT32_MAX))
            elif kind is _Kind.MESSAGE:
                out += _length_delimited(spec.tag, value.encode())
            elif kind is _Kind.PACKED_ENUM:
                body = b"".join(
                    encode_varint(_check_range(spec.name, item, _UINT32_MAX))
                    for item in value
                )
                out += _length_delimited(spec.tag, body)
        return bytes(out)

    @classmethod
    def decode(cls, data: bytes):
        """Parse a message from protobuf wire format; unknown fields are skipped."""
        data = bytes(data)
        message = cls()
        specs = {spec.tag: spec for spec in cls._FIELDS}
        pos = 0
        while pos < len(data):
            key, pos = decode_varint(data, pos)
            tag, wire = key >> 3, key & 0x07
            if wire == _WIRE_VARINT:
                value, pos = decode_varint(data, pos)
            elif wire == _WIRE_LEN:
                length, pos = decode_varint(data, pos)
                if pos + length > len(data):
                    raise ValueError("truncated length-delimited field")
                value = data[pos : pos + length]
                pos += length
            elif wire in (_WIRE_I64, _WIRE_I32):
                width = 8 if wire == _WIRE_I64 else 4
                if pos + width > len(data):
                    raise ValueError("truncated fixed-width field")
                value = data[pos : pos + width]
                pos += width
            else:
                raise ValueError(f"unsupported wire type {wire}")
            spec = specs.get(tag)
            if spec is not None:
                message._assign(spec, wire, value)
        return message

    def _assign(self, spec: _Spec, wire: int, value) -> None:
        kind = spec.kind
        if kind is _Kind.PACKED_ENUM:
            items = getattr(self, spec.name)
            if wire == _WIRE_LEN:
                pos = 0
                while pos < len(value):
                    item, pos = decode_varint(value, pos)
                    items.append(_to_enum(spec.type_, item & _UINT32_MAX))
            elif wire == _WIRE_VARINT:
                items.append(_to_enum(spec.type_, value & _UINT32_MAX))
            else:
                raise ValueError(f"field {spec.name} has wrong wire type")
            return

        expected = _WIRE_LEN if kind in (_Kind.BYTES, _Kind.MESSAGE) else _WIRE_VARINT
        if wire != expected:
            raise ValueError(f"field {spec.name} has wrong wire type")
        if kind is _Kind.BYTES:
            setattr(self, spec.name, bytes(value))
        elif kind is _Kind.UINT32:
            setattr(self, spec.name, value & _UINT32_MAX)
        elif kind is _Kind.UINT64:
            setattr(self, spec.name, value & _UINT64_MAX)
        elif kind is _Kind.BOOL:
            setattr(self, spec.name, bool(value))
        elif kind is _Kind.ENUM:
            setattr(self, spec.name, _to_enum(spec.type_, value & _UINT32_MAX))
        elif kind is _Kind.MESSAGE:
            setattr(self, spec.name, spec.type_.decode(value))


@dataclass
class LoginCryptoDiffieHellmanChallenge(Message):
    gs: bytes = b""

    _FIELDS: ClassVar[Tuple[_Spec, ...]] = (_Spec(10, "gs", _Kind.BYTES),)


@dataclass
class LoginCryptoChallengeUnion(Message):
    diffie_hellman: LoginCryptoDiffieHellmanChallenge = field(
        default_factory=LoginCryptoDiffieHellmanChallenge
    )

    _FIELDS: ClassVar[Tuple[_Spec, ...]] = (
        _Spec(10, "diffie_hellman", _Kind.MESSAGE, LoginCryptoDiffieHellmanChallenge),
    )


@dataclass
class LoginCryptoDiffieHellmanHello(Message):
    gc: bytes = b""
    server_keys_known: int = 0

    _FIELDS: ClassVar[Tuple[_Spec, ...]] = (
        _Spec(10, "gc", _Kind.BYTES),
        _Spec(20, "server_keys_known", _Kind.UINT32),
    )


@dataclass
class LoginCryptoHelloUnion(Message):
    diffie_hellman: LoginCryptoDiffieHellmanHello = field(
        default_factory=LoginCryptoDiffieHellmanHello
    )

    _FIELDS: ClassVar[Tuple[_Spec, ...]] = (
        _Spec(10, "diffie_hellman", _Kind.MESSAGE, LoginCryptoDiffieHellmanHello),
    )


@dataclass
class BuildInfo(Message):
    product: Product = Product.PRODUCT_CLIENT
    platform: Platform = Platform.PLATFORM_WIN32_X86
    version: int = 0

    _FIELDS: ClassVar[Tuple[_Spec, ...]] = (
        _Spec(10, "product", _Kind.ENUM, Product),
        _Spec(30, "platform", _Kind.ENUM, Platform),
        _Spec(40, "version", _Kind.UINT64),
    )


@dataclass
class FeatureSet(Message):
    autoupdate2: bool = False

    _FIELDS: ClassVar[Tuple[_Spec, ...]] = (_Spec(1, "autoupdate2", _Kind.BOOL),)


@dataclass
class APChallenge(Message):
    login_crypto_challenge: LoginCryptoChallengeUnion = field(
        default_factory=LoginCryptoChallengeUnion
    )

    _FIELDS: ClassVar[Tuple[_Spec, ...]] = (
        _Spec(10, "login_crypto_challenge", _Kind.MESSAGE, LoginCryptoChallengeUnion),
    )


@dataclass
class APResponseMessage(Message):
    challenge: APChallenge = field(default_factory=APChallenge)

    _FIELDS: ClassVar[Tuple[_Spec, ...]] = (
        _Spec(10, "challenge", _Kind.MESSAGE, APChallenge),
    )


@dataclass
class LoginCryptoDiffieHellmanResponse(Message):
    hmac: bytes = b""

    _FIELDS: ClassVar[Tuple[_Spec, ...]] = (_Spec(10, "hmac", _Kind.BYTES),)


@dataclass
class LoginCryptoResponseUnion(Message):
    diffie_hellman: LoginCryptoDiffieHellmanResponse = field(
        default_factory=LoginCryptoDiffieHellmanResponse
    )

    _FIELDS: ClassVar[Tuple[_Spec, ...]] = (
        _Spec(10, "diffie_hellman", _Kind.MESSAGE, LoginCryptoDiffieHellmanResponse),
    )


@dataclass
class CryptoResponseUnion(Message):
    _FIELDS: ClassVar[Tuple[_Spec, ...]] = ()


@dataclass
class PoWResponseUnion(Message):
    _FIELDS: ClassVar[Tuple[_Spec, ...]] = ()


@dataclass
class ClientResponsePlaintext(Message):
    login_crypto_response: LoginCryptoResponseUnion = field(
        default_factory=LoginCryptoResponseUnion
    )
    pow_response: PoWResponseUnion = field(default_factory=PoWResponseUnion)
    crypto_response: CryptoResponseUnion = field(default_factory=CryptoResponseUnion)

    _FIELDS: ClassVar[Tuple[_Spec, ...]] = (
        _Spec(10, "login_crypto_response", _Kind.MESSAGE, LoginCryptoResponseUnion),
        _Spec(20, "pow_response", _Kind.MESSAGE, PoWResponseUnion),
        _Spec(30, "crypto_response", _Kind.MESSAGE, CryptoResponseUnion),
    )


@dataclass
class ClientHello(Message):
    build_info: BuildInfo = field(default_factory=BuildInfo)
    login_crypto_hello: LoginCryptoHelloUnion = field(default_factory=LoginCryptoHelloUnion)
    cryptosuites_supported: List[Cryptosuite] = field(default_factory=list)
    client_nonce: bytes = b""
    padding: bytes = b""
    feature_set: FeatureSet = field(default_factory=FeatureSet)

    _FIELDS: ClassVar[Tuple[_Spec, ...]] = (
        _Spec(10, "build_info", _Kind.MESSAGE, BuildInfo),
        _Spec(50, "login_crypto_hello", _Kind.MESSAGE, LoginCryptoHelloUnion),
        _Spec(30, "cryptosuites_supported", _Kind.PACKED_ENUM, Cryptosuite),
        _Spec(60, "client_nonce", _Kind.BYTES),
        _Spec(70, "padding", _Kind.BYTES),
        _Spec(80, "feature_set", _Kind.MESSAGE, FeatureSet),
    )