"""Batch processing: send each document to the LLM and write the reply back.

Documents are handled strictly one after another. A failure on one document
is recorded and the loop moves on; cancellation is honored only between
documents, never during an in-flight request.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from aipolish.core.documents import Document

log = logging.getLogger(__name__)

# (source_text, instruction) -> replacement text
Requester = Callable[[str, str | None], str]
# (index starting at 1, total, document name)
ProgressCallback = Callable[[int, int, str], None]


@dataclass
class FileResult:
    """Outcome of processing a single document."""

    name: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchReport:
    """Ordered per-document results for one batch."""

    results: list[FileResult] = field(default_factory=list)
    cancelled: bool = False

    @property
    def succeeded(self) -> list[FileResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> list[FileResult]:
        return [r for r in self.results if r.error is not None]


def process_documents(
    documents: Iterable[Document],
    requester: Requester,
    instruction: str | None = None,
    progress: ProgressCallback | None = None,
    is_cancelled: Callable[[], bool] | None = None,
    dry_run: bool = False,
) -> BatchReport:
    """Run requester over each document and replace its text with the result.

    Args:
        documents: Documents to process, in order.
        requester: Called with (text, instruction); returns replacement text.
        instruction: Passed through to requester unchanged.
        progress: Called before each document with (index, total, name).
        is_cancelled: Checked before each document; True stops the batch.
        dry_run: Call the requester but leave documents untouched.

    Returns:
        BatchReport with one FileResult per processed document.
    """
    docs = list(documents)
    total = len(docs)
    report = BatchReport()

    for index, doc in enumerate(docs, start=1):
        if is_cancelled is not None and is_cancelled():
            log.info("Cancelled before %s (%d of %d)", doc.name, index, total)
            report.cancelled = True
            break

        if progress is not None:
            progress(index, total, doc.name)

        try:
            text = doc.read()
            replacement = requester(text, instruction)
            if dry_run:
                log.info("Dry run: %s not written (%d chars)", doc.name, len(replacement))
            else:
                doc.write(replacement)
                log.info("Wrote %d chars to %s", len(replacement), doc.name)
            report.results.append(FileResult(name=doc.name))
        except UnicodeDecodeError as e:
            log.warning("Skipping %s: not valid text (%s)", doc.name, e)
            report.results.append(FileResult(name=doc.name, error=f"not a text file: {e}"))
        except Exception as e:
            log.warning("Failed to process %s: %s", doc.name, e)
            report.results.append(FileResult(name=doc.name, error=str(e)))

    return report
