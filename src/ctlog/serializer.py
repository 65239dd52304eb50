from typing import Iterable

from construct import ConstructError

from . import constants
from . import ctl_parser_structures
from .errors import SerializationError
from .records import (DigitallySigned, LogEntryType, MerkleTreeLeaf, PrecertChainEntry, SignedCertificateTimestamp,
                      TimestampedEntry, X509ChainEntry)


def _build(structure, obj, description: str) -> bytes:
    try:
        return structure.build(obj)
    except ConstructError as e:
        raise SerializationError("Unable to serialize {}: {}".format(description, e)) from e


def _digitally_signed_dict(signed: DigitallySigned) -> dict:
    return dict(
        hash_algorithm=int(signed.hash_algorithm),
        signature_algorithm=int(signed.signature_algorithm),
        signature=signed.signature
    )


def _sct_dict(sct: SignedCertificateTimestamp) -> dict:
    return dict(
        sct_version=int(sct.version),
        id=sct.key_id,
        timestamp=sct.timestamp,
        extensions=sct.extensions,
        signature=_digitally_signed_dict(sct.signature)
    )


def _timestamped_entry_dict(entry: TimestampedEntry) -> dict:
    signed_entry = entry.signed_entry
    if entry.entry_type == LogEntryType.X509_ENTRY:
        if signed_entry.x509 is None:
            raise SerializationError("X509 entry is missing its certificate")
        entry_data = signed_entry.x509
    elif entry.entry_type == LogEntryType.PRECERT_ENTRY:
        if signed_entry.pre_cert is None:
            raise SerializationError("Precert entry is missing its PreCert")
        entry_data = dict(
            issuer_key_hash=signed_entry.pre_cert.issuer_key_hash,
            tbs_certificate=signed_entry.pre_cert.tbs_certificate
        )
    else:
        raise SerializationError("Unsupported entry type: {}".format(entry.entry_type))

    return dict(
        timestamp=entry.timestamp,
        entry_type=int(entry.entry_type),
        signed_entry=entry_data,
        # No TimestampedEntry extensions are defined; the field is always written empty.
        extensions=b""
    )


def serialize_digitally_signed(signed: DigitallySigned) -> bytes:
    return _build(ctl_parser_structures.DigitallySigned, _digitally_signed_dict(signed), "DigitallySigned")


def serialize_sct(sct: SignedCertificateTimestamp) -> bytes:
    return _build(ctl_parser_structures.SignedCertificateTimestamp, _sct_dict(sct), "SignedCertificateTimestamp")


def serialize_sct_list(scts: Iterable[SignedCertificateTimestamp]) -> bytes:
    return _build(ctl_parser_structures.SignedCertificateTimestampList, [_sct_dict(sct) for sct in scts],
                  "SignedCertificateTimestampList")


def serialize_timestamped_entry(entry: TimestampedEntry) -> bytes:
    return _build(ctl_parser_structures.TimestampedEntry, _timestamped_entry_dict(entry), "TimestampedEntry")


def serialize_merkle_tree_leaf(leaf: MerkleTreeLeaf) -> bytes:
    return _build(ctl_parser_structures.MerkleTreeLeaf, dict(
        version=int(leaf.version),
        leaf_type=constants.TIMESTAMPED_ENTRY_LEAF_TYPE,
        timestamped_entry=_timestamped_entry_dict(leaf.timestamped_entry)
    ), "MerkleTreeLeaf")


def serialize_x509_chain_entry(entry: X509ChainEntry) -> bytes:
    """Serialize the extra_data of an X.509 entry. The leaf certificate lives in the Merkle tree leaf."""
    return _build(ctl_parser_structures.CertificateChain, list(entry.certificate_chain), "X509ChainEntry")


def serialize_precert_chain_entry(entry: PrecertChainEntry) -> bytes:
    return _build(ctl_parser_structures.CertificateChain, list(entry.precertificate_chain), "PrecertChainEntry")
