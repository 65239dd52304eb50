from enum import IntEnum
from typing import NamedTuple, Optional, Tuple, Union

from .errors import InvalidArgumentError


class Version(IntEnum):
    V1 = 0


class MerkleLeafType(IntEnum):
    TIMESTAMPED_ENTRY = 0


class LogEntryType(IntEnum):
    X509_ENTRY = 0
    PRECERT_ENTRY = 1


class HashAlgorithm(IntEnum):
    NONE = 0
    MD5 = 1
    SHA1 = 2
    SHA224 = 3
    SHA256 = 4
    SHA384 = 5
    SHA512 = 6


class SignatureAlgorithm(IntEnum):
    ANONYMOUS = 0
    RSA = 1
    DSA = 2
    ECDSA = 3


class DigitallySigned(NamedTuple):
    hash_algorithm: HashAlgorithm
    signature_algorithm: SignatureAlgorithm
    signature: bytes


class SignedCertificateTimestamp(NamedTuple):
    version: Version
    key_id: bytes
    # Milliseconds since the epoch
    timestamp: int
    extensions: bytes
    signature: DigitallySigned


class PreCert(NamedTuple):
    issuer_key_hash: bytes
    tbs_certificate: bytes


class _SignedEntryFields(NamedTuple):
    x509: Optional[bytes]
    pre_cert: Optional[PreCert]


class SignedEntry(_SignedEntryFields):
    """
    Either an X.509 leaf certificate or a precertificate, never both.

    Use for_x509() or for_pre_cert() rather than the constructor.
    """
    __slots__ = ()

    def __new__(cls, x509: Optional[bytes] = None, pre_cert: Optional[PreCert] = None):
        if (x509 is None) == (pre_cert is None):
            raise InvalidArgumentError("SignedEntry needs exactly one of x509 or pre_cert")
        return super().__new__(cls, x509, pre_cert)

    @classmethod
    def for_x509(cls, certificate: bytes) -> "SignedEntry":
        return cls(x509=certificate)

    @classmethod
    def for_pre_cert(cls, pre_cert: PreCert) -> "SignedEntry":
        return cls(pre_cert=pre_cert)

    @property
    def entry_type(self) -> LogEntryType:
        if self.x509 is not None:
            return LogEntryType.X509_ENTRY
        return LogEntryType.PRECERT_ENTRY


class TimestampedEntry(NamedTuple):
    timestamp: int
    entry_type: LogEntryType
    signed_entry: SignedEntry


class MerkleTreeLeaf(NamedTuple):
    version: Version
    timestamped_entry: TimestampedEntry


class X509ChainEntry(NamedTuple):
    leaf_certificate: bytes
    certificate_chain: Tuple[bytes, ...] = ()


class PrecertChainEntry(NamedTuple):
    pre_cert: PreCert
    precertificate_chain: Tuple[bytes, ...] = ()


class MerkleAuditProof(NamedTuple):
    version: Version
    tree_size: int
    leaf_index: int
    # Ordered from the leaf towards the root
    path_node: Tuple[bytes, ...] = ()


class ParsedLogEntry(NamedTuple):
    merkle_leaf: MerkleTreeLeaf
    entry: Union[X509ChainEntry, PrecertChainEntry]

    @property
    def entry_type(self) -> LogEntryType:
        return self.merkle_leaf.timestamped_entry.entry_type


class ParsedLogEntryWithProof(NamedTuple):
    entry: ParsedLogEntry
    audit_proof: MerkleAuditProof
