# https://tools.ietf.org/html/rfc6962
import base64
from typing import Iterable, List, Union

from . import constants
from .errors import (CorruptDataError, DeserializationError, UnknownAlgorithmError, UnknownEntryTypeError,
                     UnsupportedLeafTypeError, UnsupportedVersionError)
from .reader import (ByteSource, as_stream, bytes_needed, is_exhausted, read_exact_remainder, read_fixed_length,
                     read_number, read_variable_length)
from .records import (DigitallySigned, HashAlgorithm, LogEntryType, MerkleAuditProof, MerkleTreeLeaf,
                      ParsedLogEntry, ParsedLogEntryWithProof, PreCert, PrecertChainEntry, SignatureAlgorithm,
                      SignedCertificateTimestamp, SignedEntry, TimestampedEntry, Version, X509ChainEntry)


def _read_version(source) -> Version:
    version = read_number(source, constants.VERSION_LENGTH)
    if version != Version.V1:
        raise UnsupportedVersionError(version)
    return Version(version)


def parse_sct_from_binary(source: ByteSource) -> SignedCertificateTimestamp:
    source = as_stream(source)
    version = _read_version(source)
    key_id = read_fixed_length(source, constants.KEY_ID_LENGTH)
    timestamp = read_number(source, constants.TIMESTAMP_LENGTH)
    extensions = read_variable_length(source, constants.MAX_EXTENSIONS_LENGTH)
    signature = parse_digitally_signed_from_binary(source)
    return SignedCertificateTimestamp(
        version=version,
        key_id=key_id,
        timestamp=timestamp,
        extensions=extensions,
        signature=signature
    )


def parse_digitally_signed_from_binary(source: ByteSource) -> DigitallySigned:
    source = as_stream(source)

    hash_algorithm_byte = read_number(source, constants.HASH_ALGORITHM_LENGTH)
    try:
        hash_algorithm = HashAlgorithm(hash_algorithm_byte)
    except ValueError:
        raise UnknownAlgorithmError("hash", hash_algorithm_byte) from None

    signature_algorithm_byte = read_number(source, constants.SIGNATURE_ALGORITHM_LENGTH)
    try:
        signature_algorithm = SignatureAlgorithm(signature_algorithm_byte)
    except ValueError:
        raise UnknownAlgorithmError("signature", signature_algorithm_byte) from None

    signature = read_variable_length(source, constants.MAX_SIGNATURE_LENGTH)
    return DigitallySigned(
        hash_algorithm=hash_algorithm,
        signature_algorithm=signature_algorithm,
        signature=signature
    )


def parse_merkle_tree_leaf(source: ByteSource) -> MerkleTreeLeaf:
    source = as_stream(source)
    version = _read_version(source)

    leaf_type = read_number(source, constants.LEAF_TYPE_LENGTH)
    if leaf_type != constants.TIMESTAMPED_ENTRY_LEAF_TYPE:
        raise UnsupportedLeafTypeError(leaf_type)

    return MerkleTreeLeaf(version=version, timestamped_entry=parse_timestamped_entry(source))


def parse_timestamped_entry(source: ByteSource) -> TimestampedEntry:
    source = as_stream(source)
    timestamp = read_number(source, constants.TIMESTAMP_LENGTH)

    entry_type = read_number(source, constants.LOG_ENTRY_TYPE_LENGTH)
    if entry_type == LogEntryType.X509_ENTRY:
        signed_entry = SignedEntry.for_x509(read_variable_length(source, constants.MAX_CERTIFICATE_LENGTH))
    elif entry_type == LogEntryType.PRECERT_ENTRY:
        issuer_key_hash = read_fixed_length(source, constants.ISSUER_KEY_HASH_LENGTH)
        tbs_certificate = read_variable_length(source, constants.MAX_TBS_CERTIFICATE_LENGTH)
        signed_entry = SignedEntry.for_pre_cert(PreCert(issuer_key_hash=issuer_key_hash,
                                                        tbs_certificate=tbs_certificate))
    else:
        raise UnknownEntryTypeError(entry_type)

    return TimestampedEntry(timestamp=timestamp, entry_type=LogEntryType(entry_type), signed_entry=signed_entry)


def _parse_certificate_list(source, description: str) -> List[bytes]:
    # The outer length must account for every remaining byte of the message.
    declared_length = read_number(source, bytes_needed(constants.MAX_CHAIN_LENGTH))

    certificates = []
    try:
        chain_data = read_exact_remainder(source, declared_length)
        while not is_exhausted(chain_data):
            certificates.append(read_variable_length(chain_data, constants.MAX_CERTIFICATE_LENGTH))
    except CorruptDataError:
        raise
    except DeserializationError as e:
        raise CorruptDataError("Cannot parse {}: {}".format(description, e)) from e
    return certificates


def parse_x509_chain_entry(source: ByteSource, x509_cert: bytes) -> X509ChainEntry:
    """
    Parse the extra_data of an X.509 log entry.

    :param source: the extra_data bytes, starting with the 3-byte certificate chain length.
    :param x509_cert: the leaf certificate already decoded from the Merkle tree leaf.
    """
    source = as_stream(source)
    chain = _parse_certificate_list(source, "X509ChainEntry")
    return X509ChainEntry(leaf_certificate=x509_cert, certificate_chain=tuple(chain))


def parse_precert_chain_entry(source: ByteSource, pre_cert: PreCert) -> PrecertChainEntry:
    source = as_stream(source)
    chain = _parse_certificate_list(source, "PrecertChainEntry")
    return PrecertChainEntry(pre_cert=pre_cert, precertificate_chain=tuple(chain))


def parse_log_entry(merkle_tree_leaf: ByteSource, extra_data: ByteSource) -> ParsedLogEntry:
    """
    Parse an entry retrieved from a log.

    :param merkle_tree_leaf: the leaf_input of the entry.
    :param extra_data: the extra_data of the entry, decoded according to the leaf's entry type.
    """
    tree_leaf = parse_merkle_tree_leaf(merkle_tree_leaf)
    timestamped_entry = tree_leaf.timestamped_entry

    if timestamped_entry.entry_type == LogEntryType.X509_ENTRY:
        entry = parse_x509_chain_entry(extra_data, timestamped_entry.signed_entry.x509)
    elif timestamped_entry.entry_type == LogEntryType.PRECERT_ENTRY:
        entry = parse_precert_chain_entry(extra_data, timestamped_entry.signed_entry.pre_cert)
    else:
        raise UnknownEntryTypeError(timestamped_entry.entry_type)

    return ParsedLogEntry(merkle_leaf=tree_leaf, entry=entry)


def parse_audit_proof(proof: Iterable[Union[str, bytes]], leaf_index: int, tree_size: int) -> MerkleAuditProof:
    """
    Build an audit proof from the base64 encoded Merkle tree nodes returned by a log.

    :param proof: the audit path, in the order the log returned it.
    :param leaf_index: the index of the entry the proof is for.
    :param tree_size: the tree size the proof was requested at.
    """
    path_node = []
    for index, node in enumerate(proof):
        try:
            path_node.append(base64.b64decode(node))
        except ValueError as e:
            raise CorruptDataError("Invalid base64 in audit path node {}: {}".format(index, e)) from e
    return MerkleAuditProof(version=Version.V1, tree_size=tree_size, leaf_index=leaf_index,
                            path_node=tuple(path_node))


def parse_log_entry_with_proof(entry: ParsedLogEntry, proof: Iterable[Union[str, bytes]], leaf_index: int,
                               tree_size: int) -> ParsedLogEntryWithProof:
    return ParsedLogEntryWithProof(entry=entry, audit_proof=parse_audit_proof(proof, leaf_index, tree_size))


def parse_sct_list(source: ByteSource) -> List[SignedCertificateTimestamp]:
    """
    Parse a SignedCertificateTimestampList as embedded in certificates and TLS extensions
    (RFC 6962 section 3.3). Each serialized SCT must be consumed exactly.
    """
    source = as_stream(source)
    declared_length = read_number(source, bytes_needed(constants.MAX_SCT_LIST_LENGTH))
    try:
        list_data = read_exact_remainder(source, declared_length)
    except CorruptDataError:
        raise
    except DeserializationError as e:
        raise CorruptDataError("Cannot read SignedCertificateTimestampList: {}".format(e)) from e

    scts = []
    while not is_exhausted(list_data):
        try:
            serialized_sct = read_variable_length(list_data, constants.MAX_SERIALIZED_SCT_LENGTH)
        except DeserializationError as e:
            raise CorruptDataError("Cannot parse SignedCertificateTimestampList: {}".format(e)) from e

        sct_data = as_stream(serialized_sct)
        sct = parse_sct_from_binary(sct_data)
        if not is_exhausted(sct_data):
            raise CorruptDataError("Trailing data after SCT {}".format(len(scts)),
                                   len(serialized_sct), sct_data.tell())
        scts.append(sct)
    return scts
