#!/usr/bin/env python3
"""
Command line front end for Crypter.

Usage:
    crypter [--secret-file PATH] [--encoding NAME] [--salt-length N] [--iterations N] encrypt [VALUE]
    crypter [--secret-file PATH] [--encoding NAME] [--salt-length N] [--iterations N] decrypt [ENVELOPE]

The secret comes from --secret-file, else CRYPTER_SECRET or CRYPTER_SECRET_FILE.
VALUE/ENVELOPE default to standard input when omitted or given as "-".
"""

import argparse
import logging
import sys
from typing import List, Optional

from .cipher import Cipher
from .config import load_secret, options_from_env, secret_from_env
from .encoding import supported_encodings
from .errors import CrypterError, ValidationError


logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(prog='crypter',
                                     description='Password-based AES-256-GCM envelope encryption')
    subparsers = parser.add_subparsers(dest='command', required=True, help='Sub-commands')

    # Global options
    parser.add_argument('--secret-file', type=str,
                        help='File holding the secret (default: CRYPTER_SECRET / CRYPTER_SECRET_FILE)')
    parser.add_argument('--encoding', choices=supported_encodings(),
                        help='Envelope text encoding (default: CRYPTER_ENCODING or hex)')
    parser.add_argument('--salt-length', type=int,
                        help='Salt length in bytes (default: CRYPTER_SALT_LENGTH or 64)')
    parser.add_argument('--iterations', type=int,
                        help='PBKDF2 iterations (default: CRYPTER_PBKDF2_ITERATIONS or 100000)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    encrypt_parser = subparsers.add_parser('encrypt', help='Encrypt a value')
    encrypt_parser.add_argument('value', nargs='?', default='-',
                                help='Text to encrypt ("-" reads stdin)')

    decrypt_parser = subparsers.add_parser('decrypt', help='Decrypt an envelope')
    decrypt_parser.add_argument('value', nargs='?', default='-',
                                help='Envelope to decrypt ("-" reads stdin)')

    return parser


def _read_value(value: str) -> str:
    if value != '-':
        return value
    try:
        data = sys.stdin.read()
    except UnicodeDecodeError as e:
        raise ValidationError("Standard input could not be decoded as text") from e
    # Drop the newline terminating piped input
    if data.endswith('\r\n'):
        return data[:-2]
    if data.endswith('\n'):
        return data[:-1]
    return data


def build_cipher(args: argparse.Namespace) -> Cipher:
    """Build a cipher from parsed arguments layered over the environment."""
    secret = load_secret(args.secret_file) if args.secret_file else secret_from_env()
    options = options_from_env().override(
        encoding=args.encoding,
        salt_length=args.salt_length,
        pbkdf2_iterations=args.iterations,
    )
    return Cipher(secret, options)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        cipher = build_cipher(args)
        value = _read_value(args.value)
        if args.command == 'encrypt':
            result = cipher.encrypt(value)
        else:
            result = cipher.decrypt(value)
    except CrypterError as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"crypter: error: {e}", file=sys.stderr)
        return 1

    print(result)
    return 0


if __name__ == '__main__':
    sys.exit(main())
