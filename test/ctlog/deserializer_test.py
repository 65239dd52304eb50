import base64
import io
from unittest import TestCase

from ctlog import deserializer
from ctlog.errors import (CorruptDataError, TruncatedInputError, UnknownAlgorithmError, UnknownEntryTypeError,
                          UnsupportedLeafTypeError, UnsupportedVersionError)
from ctlog.records import (HashAlgorithm, LogEntryType, PreCert, PrecertChainEntry, SignatureAlgorithm, Version,
                           X509ChainEntry)

KEY_ID = bytes(range(32))
ISSUER_KEY_HASH = b"\xaa" * 32
TIMESTAMP = 1396877277237
TIMESTAMP_BYTES = TIMESTAMP.to_bytes(8, "big")
SIGNATURE = b"\x30\x45\x02\x20" + b"\x11" * 32 + b"\x02\x21" + b"\x22" * 33


def _length_prefixed(data: bytes, width: int) -> bytes:
    return len(data).to_bytes(width, "big") + data


def _digitally_signed(hash_algorithm=4, signature_algorithm=3, signature=SIGNATURE) -> bytes:
    return bytes([hash_algorithm, signature_algorithm]) + _length_prefixed(signature, 2)


def _sct(version=0, extensions=b"") -> bytes:
    return bytes([version]) + KEY_ID + TIMESTAMP_BYTES + _length_prefixed(extensions, 2) + _digitally_signed()


def _x509_leaf(cert: bytes, version=0, leaf_type=0) -> bytes:
    return bytes([version, leaf_type]) + TIMESTAMP_BYTES + b"\x00\x00" + _length_prefixed(cert, 3)


def _precert_leaf(tbs: bytes) -> bytes:
    return b"\x00\x00" + TIMESTAMP_BYTES + b"\x00\x01" + ISSUER_KEY_HASH + _length_prefixed(tbs, 2)


def _chain(*certs: bytes) -> bytes:
    return _length_prefixed(b"".join(_length_prefixed(cert, 3) for cert in certs), 3)


class _ResetStream(io.RawIOBase):
    """Yields its data one byte per read, then fails like a dropped connection."""

    def __init__(self, data: bytes):
        self._data = data
        self._pos = 0

    def readable(self):
        return True

    def readinto(self, b):
        if self._pos >= len(self._data):
            raise OSError("Connection reset by peer")
        b[0] = self._data[self._pos]
        self._pos += 1
        return 1


class TestParseSct(TestCase):
    def test_parse(self):
        sct = deserializer.parse_sct_from_binary(io.BytesIO(_sct(extensions=b"ext")))
        self.assertEqual(Version.V1, sct.version)
        self.assertEqual(KEY_ID, sct.key_id)
        self.assertEqual(TIMESTAMP, sct.timestamp)
        self.assertEqual(b"ext", sct.extensions)
        self.assertEqual(HashAlgorithm.SHA256, sct.signature.hash_algorithm)
        self.assertEqual(SignatureAlgorithm.ECDSA, sct.signature.signature_algorithm)
        self.assertEqual(SIGNATURE, sct.signature.signature)

    def test_parse_from_bytes(self):
        sct = deserializer.parse_sct_from_binary(_sct())
        self.assertEqual(b"", sct.extensions)

    def test_leaves_following_bytes_unread(self):
        stream = io.BytesIO(_sct() + b"next")
        deserializer.parse_sct_from_binary(stream)
        self.assertEqual(b"next", stream.read())

    def test_unsupported_version(self):
        with self.assertRaises(UnsupportedVersionError) as cm:
            deserializer.parse_sct_from_binary(_sct(version=1))
        self.assertEqual(1, cm.exception.version)

    def test_truncated_key_id(self):
        with self.assertRaises(TruncatedInputError) as cm:
            deserializer.parse_sct_from_binary(b"\x00" + KEY_ID[:31])
        self.assertEqual(32, cm.exception.expected)
        self.assertEqual(31, cm.exception.actual)

    def test_every_truncation_fails(self):
        encoded = _sct(extensions=b"ext")
        for length in range(len(encoded)):
            with self.assertRaises(TruncatedInputError):
                deserializer.parse_sct_from_binary(encoded[:length])


class TestParseDigitallySigned(TestCase):
    def test_parse(self):
        signed = deserializer.parse_digitally_signed_from_binary(_digitally_signed(2, 1, b"sig"))
        self.assertEqual(HashAlgorithm.SHA1, signed.hash_algorithm)
        self.assertEqual(SignatureAlgorithm.RSA, signed.signature_algorithm)
        self.assertEqual(b"sig", signed.signature)

    def test_unknown_hash_algorithm(self):
        with self.assertRaises(UnknownAlgorithmError) as cm:
            deserializer.parse_digitally_signed_from_binary(_digitally_signed(hash_algorithm=7))
        self.assertEqual("hash", cm.exception.kind)
        self.assertEqual(7, cm.exception.value)

    def test_unknown_signature_algorithm(self):
        with self.assertRaises(UnknownAlgorithmError) as cm:
            deserializer.parse_digitally_signed_from_binary(_digitally_signed(signature_algorithm=0xff))
        self.assertEqual("signature", cm.exception.kind)
        self.assertEqual(0xff, cm.exception.value)

    def test_truncated_signature(self):
        with self.assertRaises(TruncatedInputError) as cm:
            deserializer.parse_digitally_signed_from_binary(b"\x04\x03\x00\x10" + b"\x00" * 12)
        self.assertEqual(16, cm.exception.expected)
        self.assertEqual(12, cm.exception.actual)


class TestParseMerkleTreeLeaf(TestCase):
    def test_x509_leaf(self):
        leaf = deserializer.parse_merkle_tree_leaf(io.BytesIO(_x509_leaf(b"certificate")))
        self.assertEqual(Version.V1, leaf.version)
        entry = leaf.timestamped_entry
        self.assertEqual(TIMESTAMP, entry.timestamp)
        self.assertEqual(LogEntryType.X509_ENTRY, entry.entry_type)
        self.assertEqual(b"certificate", entry.signed_entry.x509)
        self.assertIsNone(entry.signed_entry.pre_cert)

    def test_precert_leaf(self):
        leaf = deserializer.parse_merkle_tree_leaf(_precert_leaf(b"tbs"))
        entry = leaf.timestamped_entry
        self.assertEqual(LogEntryType.PRECERT_ENTRY, entry.entry_type)
        self.assertIsNone(entry.signed_entry.x509)
        self.assertEqual(PreCert(issuer_key_hash=ISSUER_KEY_HASH, tbs_certificate=b"tbs"),
                         entry.signed_entry.pre_cert)
        self.assertEqual(LogEntryType.PRECERT_ENTRY, entry.signed_entry.entry_type)

    def test_unsupported_version(self):
        with self.assertRaises(UnsupportedVersionError):
            deserializer.parse_merkle_tree_leaf(_x509_leaf(b"cert", version=2))

    def test_unsupported_leaf_type(self):
        with self.assertRaises(UnsupportedLeafTypeError) as cm:
            deserializer.parse_merkle_tree_leaf(_x509_leaf(b"cert", leaf_type=1))
        self.assertEqual(1, cm.exception.leaf_type)

    def test_unknown_entry_type(self):
        with self.assertRaises(UnknownEntryTypeError) as cm:
            deserializer.parse_merkle_tree_leaf(b"\x00\x00" + TIMESTAMP_BYTES + b"\x00\x02" + b"\x00" * 40)
        self.assertEqual(2, cm.exception.entry_type)

    def test_unknown_entry_type_reads_no_signed_entry(self):
        stream = io.BytesIO(TIMESTAMP_BYTES + b"\x00\x02" + b"rest")
        with self.assertRaises(UnknownEntryTypeError):
            deserializer.parse_timestamped_entry(stream)
        self.assertEqual(b"rest", stream.read())

    def test_truncated_certificate(self):
        with self.assertRaises(TruncatedInputError) as cm:
            deserializer.parse_merkle_tree_leaf(_x509_leaf(b"certificate")[:-4])
        self.assertEqual(11, cm.exception.expected)
        self.assertEqual(7, cm.exception.actual)

    def test_truncated_issuer_key_hash(self):
        with self.assertRaises(TruncatedInputError):
            deserializer.parse_merkle_tree_leaf(_precert_leaf(b"tbs")[:2 + 8 + 2 + 31])


class TestParseChainEntries(TestCase):
    def test_x509_chain(self):
        entry = deserializer.parse_x509_chain_entry(io.BytesIO(_chain(b"intermediate", b"root")), b"leaf")
        self.assertEqual(X509ChainEntry(leaf_certificate=b"leaf", certificate_chain=(b"intermediate", b"root")),
                         entry)

    def test_precert_chain(self):
        pre_cert = PreCert(issuer_key_hash=ISSUER_KEY_HASH, tbs_certificate=b"tbs")
        entry = deserializer.parse_precert_chain_entry(_chain(b"precert", b"issuer"), pre_cert)
        self.assertEqual(PrecertChainEntry(pre_cert=pre_cert, precertificate_chain=(b"precert", b"issuer")), entry)

    def test_empty_chain(self):
        entry = deserializer.parse_x509_chain_entry(b"\x00\x00\x00", b"leaf")
        self.assertEqual((), entry.certificate_chain)

    def test_outer_length_too_long(self):
        data = bytearray(_chain(b"intermediate"))
        data[2] += 1
        with self.assertRaises(CorruptDataError):
            deserializer.parse_x509_chain_entry(bytes(data), b"leaf")

    def test_outer_length_ignores_valid_trailing_entry(self):
        # The trailing bytes would parse as a valid entry list, but the outer length doesn't cover them.
        data = _chain(b"intermediate") + _length_prefixed(b"root", 3)
        with self.assertRaises(CorruptDataError) as cm:
            deserializer.parse_precert_chain_entry(data, PreCert(ISSUER_KEY_HASH, b"tbs"))
        self.assertEqual(len(_chain(b"intermediate")) - 3, cm.exception.expected)

    def test_inner_entry_overruns_list(self):
        data = _length_prefixed(b"\x00\x00\x09abc", 3)
        with self.assertRaises(CorruptDataError) as cm:
            deserializer.parse_x509_chain_entry(data, b"leaf")
        self.assertIsInstance(cm.exception.__cause__, TruncatedInputError)

    def test_missing_outer_length(self):
        with self.assertRaises(TruncatedInputError):
            deserializer.parse_x509_chain_entry(b"\x00", b"leaf")

    def test_read_failure_inside_chain(self):
        # Declares 7 bytes of chain but the connection drops after 5 of them.
        with self.assertRaises(CorruptDataError) as cm:
            deserializer.parse_x509_chain_entry(_ResetStream(b"\x00\x00\x07\x00\x00\x04ab"), b"leaf")
        self.assertIsInstance(cm.exception.__cause__.__cause__, OSError)


class TestParseLogEntry(TestCase):
    def test_x509_entry(self):
        parsed = deserializer.parse_log_entry(io.BytesIO(_x509_leaf(b"leaf")), io.BytesIO(_chain(b"root")))
        self.assertEqual(LogEntryType.X509_ENTRY, parsed.entry_type)
        self.assertEqual(X509ChainEntry(leaf_certificate=b"leaf", certificate_chain=(b"root",)), parsed.entry)

    def test_precert_entry(self):
        parsed = deserializer.parse_log_entry(_precert_leaf(b"tbs"), _chain(b"precert", b"root"))
        self.assertEqual(LogEntryType.PRECERT_ENTRY, parsed.entry_type)
        self.assertIsInstance(parsed.entry, PrecertChainEntry)
        self.assertEqual(b"tbs", parsed.entry.pre_cert.tbs_certificate)
        self.assertEqual((b"precert", b"root"), parsed.entry.precertificate_chain)

    def test_corrupt_extra_data(self):
        with self.assertRaises(CorruptDataError):
            deserializer.parse_log_entry(_x509_leaf(b"leaf"), _chain(b"root") + b"\x00")


class TestParseAuditProof(TestCase):
    def test_parse(self):
        nodes = [b"\x01" * 32, b"\x02" * 32, b"\x03" * 32]
        proof = deserializer.parse_audit_proof([base64.b64encode(n).decode('utf-8') for n in nodes], 5, 10)
        self.assertEqual(Version.V1, proof.version)
        self.assertEqual(5, proof.leaf_index)
        self.assertEqual(10, proof.tree_size)
        self.assertEqual(tuple(nodes), proof.path_node)

    def test_node_content_is_not_inspected(self):
        proof = deserializer.parse_audit_proof(["", "YQ==", base64.b64encode(b"x" * 100)], 0, 1)
        self.assertEqual((b"", b"a", b"x" * 100), proof.path_node)

    def test_empty_proof(self):
        self.assertEqual((), deserializer.parse_audit_proof([], 0, 1).path_node)

    def test_invalid_base64(self):
        with self.assertRaises(CorruptDataError):
            deserializer.parse_audit_proof(["AAA"], 0, 1)

    def test_with_entry(self):
        parsed = deserializer.parse_log_entry(_x509_leaf(b"leaf"), _chain())
        with_proof = deserializer.parse_log_entry_with_proof(parsed, ["AAAA"], 3, 4)
        self.assertIs(parsed, with_proof.entry)
        self.assertEqual((b"\x00\x00\x00",), with_proof.audit_proof.path_node)
        self.assertEqual(3, with_proof.audit_proof.leaf_index)


class TestParseSctList(TestCase):
    def test_parse(self):
        encoded = _length_prefixed(_length_prefixed(_sct(), 2) + _length_prefixed(_sct(extensions=b"x"), 2), 2)
        scts = deserializer.parse_sct_list(encoded)
        self.assertEqual(2, len(scts))
        self.assertEqual(b"", scts[0].extensions)
        self.assertEqual(b"x", scts[1].extensions)

    def test_empty(self):
        self.assertEqual([], deserializer.parse_sct_list(b"\x00\x00"))

    def test_trailing_bytes_inside_sct(self):
        encoded = _length_prefixed(_length_prefixed(_sct() + b"\x00", 2), 2)
        with self.assertRaises(CorruptDataError):
            deserializer.parse_sct_list(encoded)

    def test_list_length_mismatch(self):
        encoded = _length_prefixed(_length_prefixed(_sct(), 2), 2) + b"\x00"
        with self.assertRaises(CorruptDataError):
            deserializer.parse_sct_list(encoded)

    def test_read_failure_inside_list(self):
        with self.assertRaises(CorruptDataError) as cm:
            deserializer.parse_sct_list(_ResetStream(b"\x00\x10\x00\x0e\x00"))
        self.assertIsInstance(cm.exception.__cause__.__cause__, OSError)
