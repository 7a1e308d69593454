#!/usr/bin/env python3
"""
Command-line interface for NeoEnigma.

Usage:
    neoenigma encode TEXT [cipher options]
    neoenigma decode TEXT [cipher options]
    neoenigma trace LETTERS [cipher options]
    neoenigma obfuscate PATH [cipher options] [--seed N] [--no-analyzer]
    neoenigma deobfuscate PATH [cipher options]
    neoenigma auto PATH [--seed N]
    neoenigma generate-config
    neoenigma export-config OUTPUT [cipher options]
    neoenigma import-config FILE

Cipher options: --rotors I-II-III --start AAA --rings AAA --plugboard "AB CD"
--reflector B, or --config FILE (plain JSON record), or --encrypted-config FILE.
"""

import argparse
import getpass
import logging
import random
import sys
from typing import Optional

from ..config import ConfigError, NeoEnigmaConfig
from ..machine.alphabet import is_letter, position_to_letter
from ..machine.codec import transform_text
from ..machine.engine import create_machine
from ..machine.settings import ConfigurationError, EnigmaConfig, generate_random_config
from ..obfuscation.analyzer import HeuristicAnalyzer
from ..workspace.files import LocalFileStore
from ..workspace.processor import BatchReport, WorkspaceProcessor, auto_obfuscate

PATH_STAGES = ('keyboard', 'plugboard', 'rotor 3', 'rotor 2', 'rotor 1', 'reflector',
               'rotor 1', 'rotor 2', 'rotor 3', 'plugboard')


def add_cipher_options(parser: argparse.ArgumentParser) -> None:
    """Add the options that describe a cipher configuration."""
    group = parser.add_argument_group('cipher configuration')
    group.add_argument('--rotors', type=str, default='I-II-III',
                       help='Rotor names left to right (default: I-II-III)')
    group.add_argument('--start', type=str, default='AAA',
                       help='Rotor start letters (default: AAA)')
    group.add_argument('--rings', type=str, default='AAA',
                       help='Ring setting letters (default: AAA)')
    group.add_argument('--plugboard', type=str, default='',
                       help='Space-separated plugboard pairs, e.g. "AB CD"')
    group.add_argument('--reflector', type=str, default='B',
                       help='Reflector name (default: B)')
    group.add_argument('--config', type=str, dest='config_file',
                       help='Plain JSON configuration file (overrides the options above)')
    group.add_argument('--encrypted-config', type=str,
                       help='Encrypted configuration file (overrides the options above)')


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(prog='neoenigma',
                                     description='Rotor cipher and source obfuscation toolkit')
    parser.add_argument('--verbose', action='store_true', help='Verbose logging')
    parser.add_argument('--config-dir', type=str,
                        help='Configuration directory (default: ~/.neoenigma)')
    subparsers = parser.add_subparsers(dest='command', help='Sub-commands')

    for name, help_text in (('encode', 'Encipher text'), ('decode', 'Decipher text')):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('text', type=str, help='Text to transform')
        add_cipher_options(sub)

    trace_parser = subparsers.add_parser('trace', help='Show the signal path for each letter')
    trace_parser.add_argument('letters', type=str, help='Letters to encipher')
    add_cipher_options(trace_parser)

    obfuscate_parser = subparsers.add_parser('obfuscate', help='Obfuscate all files in a workspace')
    obfuscate_parser.add_argument('path', type=str, help='Workspace root')
    obfuscate_parser.add_argument('--seed', type=int, help='Seed for randomized passes')
    obfuscate_parser.add_argument('--no-analyzer', action='store_true',
                                  help='Apply every pass instead of analyzer-selected strategies')
    add_cipher_options(obfuscate_parser)

    deobfuscate_parser = subparsers.add_parser('deobfuscate',
                                               help='Deobfuscate all files in a workspace')
    deobfuscate_parser.add_argument('path', type=str, help='Workspace root')
    add_cipher_options(deobfuscate_parser)

    auto_parser = subparsers.add_parser('auto',
                                        help='Obfuscate with a random configuration and save it encrypted')
    auto_parser.add_argument('path', type=str, help='Workspace root')
    auto_parser.add_argument('--seed', type=int, help='Seed for randomized passes')

    generate_parser = subparsers.add_parser('generate-config', help='Print a random configuration')
    generate_parser.add_argument('--plug-pairs', type=int, default=10,
                                 help='Number of plugboard pairs (default: 10)')

    export_parser = subparsers.add_parser('export-config', help='Save a configuration encrypted')
    export_parser.add_argument('output', type=str, help='Output file')
    add_cipher_options(export_parser)

    import_parser = subparsers.add_parser('import-config', help='Decrypt and print a configuration')
    import_parser.add_argument('file', type=str, help='Encrypted configuration file')

    return parser


def prompt_passphrase(prompt: str = 'Enter passphrase to decrypt configuration: ') -> Optional[str]:
    """Ask for a passphrase on the terminal; empty input cancels."""
    try:
        return getpass.getpass(prompt) or None
    except (EOFError, KeyboardInterrupt):
        return None


def load_cipher_config(args: argparse.Namespace, manager: NeoEnigmaConfig) -> EnigmaConfig:
    """
    Resolve the cipher configuration from command-line arguments.

    Raises:
        ConfigurationError: If the configuration is invalid
        ConfigError: If an encrypted configuration cannot be imported
    """
    if args.encrypted_config:
        return manager.load_encrypted_config(args.encrypted_config, prompt_passphrase)

    if args.config_file:
        try:
            with open(args.config_file, 'r', encoding='utf-8') as f:
                return EnigmaConfig.from_json(f.read())
        except OSError as e:
            raise ConfigError(f"Error reading configuration file: {e}") from e

    return EnigmaConfig(
        rotors=args.rotors,
        rotor_start=args.start,
        rings=args.rings,
        plugboard=args.plugboard,
        reflector=args.reflector,
    )


def run_trace(letters: str, config: EnigmaConfig) -> None:
    machine = create_machine(config)
    for char in letters:
        if not is_letter(char):
            continue
        result = machine.encipher(char)
        stages = ' -> '.join(f"{stage}:{position_to_letter(signal)}"
                             for stage, signal in zip(PATH_STAGES, result.path))
        print(f"{char.upper()} => {result.letter}  [{stages}]  rotors={machine.positions}")


def report_batch(report: BatchReport) -> int:
    print(f"✅ Processed: {len(report.processed)}")
    if report.failed:
        print(f"❌ Failed: {len(report.failed)}")
        for result in report.results:
            if result.status == "failed":
                print(f"   {result.path}: {result.error_message}")
        return 1
    return 0


def main(argv=None):
    """Main entry point for the command-line interface."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    try:
        manager = NeoEnigmaConfig(args.config_dir)

        if args.command in ('encode', 'decode'):
            config = load_cipher_config(args, manager)
            print(transform_text(args.text, config))
            return 0

        elif args.command == 'trace':
            run_trace(args.letters, load_cipher_config(args, manager))
            return 0

        elif args.command == 'obfuscate':
            config = load_cipher_config(args, manager)
            analyzer = None if args.no_analyzer else HeuristicAnalyzer()
            processor = WorkspaceProcessor(LocalFileStore(args.path), config, analyzer,
                                           random.Random(args.seed))
            return report_batch(processor.process(obfuscate=True))

        elif args.command == 'deobfuscate':
            config = load_cipher_config(args, manager)
            processor = WorkspaceProcessor(LocalFileStore(args.path), config)
            return report_batch(processor.process(obfuscate=False))

        elif args.command == 'auto':
            print("🔧 Generating configuration and obfuscating workspace...")
            passphrase, _, report = auto_obfuscate(LocalFileStore(args.path), manager,
                                                   HeuristicAnalyzer(), random.Random(args.seed))
            status = report_batch(report)
            print("🔑 Passphrase (save it securely, it is shown only once):")
            print(passphrase)
            return status

        elif args.command == 'generate-config':
            print(generate_random_config(plug_pairs=args.plug_pairs).to_json())
            return 0

        elif args.command == 'export-config':
            config = load_cipher_config(args, manager)
            passphrase = prompt_passphrase('Enter passphrase to encrypt configuration: ')
            manager.save_encrypted_config(args.output, config, passphrase)
            print(f"Configuration exported securely to {args.output}")
            return 0

        elif args.command == 'import-config':
            config = manager.load_encrypted_config(args.file, prompt_passphrase)
            print(config.to_json())
            return 0

    except (ConfigurationError, ConfigError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


if __name__ == '__main__':
    sys.exit(main())
