from typing import List, Optional

from cryptography import x509
from cryptography.x509.oid import ExtensionOID, NameOID

from .records import LogEntryType, ParsedLogEntry


def load_certificate(cert: bytes) -> x509.Certificate:
    """Load a certificate given as either PEM or DER."""
    if cert.lstrip().startswith(b"-----BEGIN"):
        return x509.load_pem_x509_certificate(cert)
    return x509.load_der_x509_certificate(cert)


def get_entry_certificate(entry: ParsedLogEntry) -> Optional[x509.Certificate]:
    if entry.entry_type == LogEntryType.X509_ENTRY:
        # We have a normal x509 entry
        return load_certificate(entry.entry.leaf_certificate)
    # We have a precert entry; the submitted precertificate heads the chain
    if len(entry.entry.precertificate_chain) == 0:
        return None
    return load_certificate(entry.entry.precertificate_chain[0])


def get_subject_cn(cert: x509.Certificate) -> Optional[str]:
    attributes = cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    if len(attributes) == 0:
        return None
    return attributes[0].value


def get_sans(cert: x509.Certificate) -> List[str]:
    try:
        ext = cert.extensions.get_extension_for_oid(ExtensionOID.SUBJECT_ALTERNATIVE_NAME)
    except x509.ExtensionNotFound:
        return []
    return ext.value.get_values_for_type(x509.DNSName)
