import base64
import io
import json
import sys
from typing import List

from . import cert_encoding
from .deserializer import parse_audit_proof, parse_log_entry, parse_sct_from_binary, parse_sct_list
from .records import LogEntryType, SignedCertificateTimestamp


class CtlogMain:
    def __init__(self, out: io.IOBase = None, debug_file: io.IOBase = None):
        self._out = out if out is not None else sys.stdout
        self._debug_file = debug_file

    def _debug(self, message: str):
        if self._debug_file is not None:
            print(message, file=self._debug_file)

    def _load_json(self, path: str):
        if path == "-":
            self._debug("Reading JSON from stdin")
            return json.loads(sys.stdin.read())
        self._debug("Reading JSON from {}".format(path))
        with open(path, "r") as f:
            return json.loads(f.read())

    def _print_sct(self, sct: SignedCertificateTimestamp):
        print("version\t{}".format(sct.version.name), file=self._out)
        print("log_id\t{}".format(base64.b64encode(sct.key_id).decode('utf-8')), file=self._out)
        print("timestamp\t{}".format(sct.timestamp), file=self._out)
        print("extensions\t{}".format(base64.b64encode(sct.extensions).decode('utf-8')), file=self._out)
        print("hash_algorithm\t{}".format(sct.signature.hash_algorithm.name), file=self._out)
        print("signature_algorithm\t{}".format(sct.signature.signature_algorithm.name), file=self._out)
        print("signature\t{}".format(base64.b64encode(sct.signature.signature).decode('utf-8')), file=self._out)

    def entries(self, cliArgs: List[str]):
        if len(cliArgs) != 1:
            raise Exception("ctlog entries expects exactly one argument")
        entries = self._load_json(cliArgs[0])["entries"]
        self._debug("Decoding {} entries".format(len(entries)))

        for index, entry in enumerate(entries):
            parsed = parse_log_entry(base64.b64decode(entry["leaf_input"]),
                                     base64.b64decode(entry["extra_data"]))
            timestamped_entry = parsed.merkle_leaf.timestamped_entry
            if parsed.entry_type == LogEntryType.X509_ENTRY:
                chain_length = len(parsed.entry.certificate_chain)
            else:
                chain_length = len(parsed.entry.precertificate_chain)
            cert = cert_encoding.get_entry_certificate(parsed)
            common_name = None
            sans = []
            if cert is not None:
                common_name = cert_encoding.get_subject_cn(cert)
                sans = cert_encoding.get_sans(cert)
            print("{}\t{}\t{}\t{}\t{}\t{}".format(index,
                                                  timestamped_entry.timestamp,
                                                  parsed.entry_type.name,
                                                  common_name,
                                                  chain_length,
                                                  ",".join(sans)), file=self._out)

    def proof(self, cliArgs: List[str]):
        if len(cliArgs) != 2:
            raise Exception("ctlog proof expects exactly two arguments: <file> <tree_size>")
        response = self._load_json(cliArgs[0])
        audit_proof = parse_audit_proof(response["audit_path"], int(response["leaf_index"]), int(cliArgs[1]))

        print("leaf_index\t{}".format(audit_proof.leaf_index), file=self._out)
        print("tree_size\t{}".format(audit_proof.tree_size), file=self._out)
        for node in audit_proof.path_node:
            print(base64.b64encode(node).decode('utf-8'), file=self._out)

    def sct(self, cliArgs: List[str]):
        if len(cliArgs) != 1:
            raise Exception("ctlog sct expects exactly one argument")
        self._print_sct(parse_sct_from_binary(base64.b64decode(cliArgs[0])))

    def sct_list(self, cliArgs: List[str]):
        if len(cliArgs) != 1:
            raise Exception("ctlog sct-list expects exactly one argument")
        scts = parse_sct_list(base64.b64decode(cliArgs[0]))
        self._debug("Found {} SCTs".format(len(scts)))
        for i, sct in enumerate(scts):
            if i > 0:
                print(file=self._out)
            self._print_sct(sct)


def main(args, out: io.IOBase = None, debug_file: io.IOBase = None):
    if len(args) == 0:
        raise Exception("Usage: ctlog <entries|proof|sct|sct-list> ...")
    ctlog_main = CtlogMain(out=out, debug_file=debug_file)
    if args[0] == 'entries':
        ctlog_main.entries(args[1:])
    elif args[0] == 'proof':
        ctlog_main.proof(args[1:])
    elif args[0] == 'sct':
        ctlog_main.sct(args[1:])
    elif args[0] == 'sct-list':
        ctlog_main.sct_list(args[1:])
    else:
        raise Exception("Unsupported subcommand: " + args[0])


def cli():
    main(sys.argv[1:], debug_file=sys.stderr)


if __name__ == "__main__":
    cli()
