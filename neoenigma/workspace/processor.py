"""
Batch obfuscation of workspace files.

Every file gets its own engine built from the shared configuration, and a
failure on one file is logged and recorded without stopping the batch.
Batch-level secret handling (passphrase generation, config persistence)
happens once, after the per-file loop.
"""

import logging
import os
import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..config import CONFIG_SECRET_FILE, NeoEnigmaConfig
from ..machine.settings import EnigmaConfig, generate_random_config
from ..obfuscation.analyzer import CodeAnalyzer
from ..obfuscation.pipeline import deobfuscate_source, obfuscate_source
from .files import FileStore, LocalFileStore


@dataclass
class FileResult:
    """Outcome for one file."""
    path: str
    status: str = "processed"  # processed, failed
    error_message: Optional[str] = None


@dataclass
class BatchReport:
    """Outcome for a whole batch."""
    results: List[FileResult] = field(default_factory=list)

    @property
    def processed(self) -> List[str]:
        return [r.path for r in self.results if r.status == "processed"]

    @property
    def failed(self) -> List[str]:
        return [r.path for r in self.results if r.status == "failed"]

    @property
    def ok(self) -> bool:
        return not self.failed


class WorkspaceProcessor:
    """
    Obfuscates or deobfuscates every supported file in a store.
    """

    def __init__(self, store: FileStore, config: EnigmaConfig,
                 analyzer: Optional[CodeAnalyzer] = None,
                 rng: Optional[random.Random] = None):
        """
        Initialize the processor.

        Args:
            store: File enumeration/IO collaborator
            config: Cipher configuration shared by all files
            analyzer: Optional classifier choosing obfuscation strategies
            rng: Random source for randomized passes
        """
        self.store = store
        self.config = config
        self.analyzer = analyzer
        self.rng = rng if rng is not None else random.Random()
        self.logger = logging.getLogger(__name__)

    def obfuscate_content(self, content: str, file_extension: str) -> str:
        return obfuscate_source(content, self.config, file_extension, self.analyzer, self.rng)

    def deobfuscate_content(self, content: str) -> str:
        return deobfuscate_source(content, self.config)

    def process_file(self, path: str, obfuscate: bool) -> FileResult:
        """
        Read, transform and write back one file.

        Returns:
            FileResult; failures are captured, never raised
        """
        try:
            content = self.store.read(path)
            if obfuscate:
                content = self.obfuscate_content(content, os.path.splitext(path)[1])
            else:
                content = self.deobfuscate_content(content)
            self.store.write(path, content)
            self.logger.info(f"{'Obfuscated' if obfuscate else 'Deobfuscated'} {path}")
            return FileResult(path=path)
        except Exception as e:
            self.logger.error(f"Error processing file {path}: {e}")
            return FileResult(path=path, status="failed", error_message=str(e))

    def process(self, obfuscate: bool) -> BatchReport:
        """
        Process every supported file in the store.

        Args:
            obfuscate: True to obfuscate, False to deobfuscate

        Returns:
            BatchReport with one entry per visited file
        """
        report = BatchReport()
        mode = "obfuscation" if obfuscate else "deobfuscation"

        try:
            paths = list(self.store.iter_files())
        except OSError as e:
            self.logger.error(f"Failed to enumerate workspace files: {e}")
            raise

        self.logger.info(f"Starting {mode} of {len(paths)} files")
        for path in paths:
            report.results.append(self.process_file(path, obfuscate))

        self.logger.info(f"Finished {mode}: {len(report.processed)} processed, "
                         f"{len(report.failed)} failed")
        return report


def auto_obfuscate(store: LocalFileStore, manager: NeoEnigmaConfig,
                   analyzer: Optional[CodeAnalyzer] = None,
                   rng: Optional[random.Random] = None) -> Tuple[str, EnigmaConfig, BatchReport]:
    """
    Obfuscate a workspace under a freshly generated configuration.

    Steps: generate a random configuration, obfuscate every file, then
    generate and store a passphrase and save the encrypted configuration as
    `enigma_config_secret.json` in the workspace root.

    Args:
        store: Workspace file store
        manager: Configuration manager holding the stored passphrase
        analyzer: Optional classifier
        rng: Random source for the obfuscation passes

    Returns:
        Tuple of (passphrase, configuration, batch report)

    Raises:
        ConfigError: If the passphrase or encrypted configuration cannot be saved
    """
    config = generate_random_config()
    report = WorkspaceProcessor(store, config, analyzer, rng).process(obfuscate=True)

    passphrase = manager.create_new_passphrase()
    manager.save_encrypted_config(store.path_in_root(CONFIG_SECRET_FILE), config, passphrase)

    return passphrase, config, report
