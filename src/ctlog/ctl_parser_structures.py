# https://tools.ietf.org/html/rfc6962
# Encoding-side declarations of the structures that deserializer.py decodes field by field.
# Decoding stays in deserializer.py so each failure point raises its own error type.
from construct import Struct, Switch, Byte, Int16ub, Int64ub, Bytes, Int24ub, this, GreedyBytes, GreedyRange, \
    Prefixed

from . import constants

CtExtensions = Prefixed(Int16ub, GreedyBytes)

ASN1Cert = Prefixed(Int24ub, GreedyBytes)

PreCert = Struct(
    "issuer_key_hash" / Bytes(constants.ISSUER_KEY_HASH_LENGTH),
    "tbs_certificate" / Prefixed(Int16ub, GreedyBytes)
)

TimestampedEntry = Struct(
    "timestamp"       / Int64ub,
    "entry_type"      / Int16ub,
    "signed_entry"    / Switch(this.entry_type,
                               {
                                   0: ASN1Cert,
                                   1: PreCert
                               }),
    "extensions"      / CtExtensions
)

MerkleTreeLeaf = Struct(
    "version"           / Byte,
    "leaf_type"         / Byte,
    "timestamped_entry" / TimestampedEntry
)

DigitallySigned = Struct(
    "hash_algorithm"      / Byte,
    "signature_algorithm" / Byte,
    "signature"           / Prefixed(Int16ub, GreedyBytes)
)

SignedCertificateTimestamp = Struct(
    "sct_version" / Byte,
    "id"          / Bytes(constants.KEY_ID_LENGTH),
    "timestamp"   / Int64ub,
    "extensions"  / CtExtensions,
    "signature"   / DigitallySigned
)

SerializedSCT = Prefixed(Int16ub, SignedCertificateTimestamp)

SignedCertificateTimestampList = Prefixed(Int16ub, GreedyRange(SerializedSCT))

# extra_data of both X.509 and precert entries
CertificateChain = Prefixed(Int24ub, GreedyRange(ASN1Cert))
