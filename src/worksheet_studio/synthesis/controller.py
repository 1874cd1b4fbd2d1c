"""
Module: synthesis.controller

Purpose:
    Orchestrates one editing session: acquires the reference image, calls
    the content generator, validates responses into snapshots, tracks
    per-section image regeneration and runs exports. All failures end up
    in a single dismissible error banner; the current snapshot is never
    left half-updated.

Key Classes:
    - StudioController: Session state and operations
    - ExportResult: Outcome of a successful export

Key Functions:
    - export_filename(): Download name for a document

Dependencies:
    - concurrent.futures: Background image regeneration
    - synthesis.layout, synthesis.output, synthesis.acquisition

Used By:
    - worksheet_studio.cli
"""

from __future__ import annotations

import io
import logging
import os
import re
import tempfile
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from worksheet_studio.core.models import (
    BrandingOptions,
    ExamData,
    GeneratedWorksheetImage,
    SearchResult,
    WorksheetData,
)
from worksheet_studio.core.schemas import parse_exam, parse_search_results, parse_worksheet
from worksheet_studio.errors import (
    ExportFailure,
    GenerationFailure,
    ImageDecodeFailure,
    StudioError,
)

from .acquisition import ReferenceImage, fetch_image, load_image_file
from .config import SynthesisConfig
from .generation import ContentGenerator
from .images import SourceImageProvider, decode_image, is_remote_url
from .layout import DocumentView, RegenerationTracker, RenderTarget, synthesize_view
from .layout.view import DocumentData
from .output import render_to_pdf, render_to_png, synthesize_document

logger = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "Please enter instructions or upload a reference image."
MISSING_EXAM_IMAGE_MESSAGE = "Please upload a photo of the exam paper."
WORKSHEET_FAILURE_MESSAGE = "Failed to generate worksheet. Please try again."
VISUAL_FAILURE_MESSAGE = "Failed to generate worksheet image. Please try again."
EXAM_FAILURE_MESSAGE = "Failed to transcribe exam. Please ensure handwriting is legible."
REGENERATION_FAILURE_MESSAGE = "Failed to regenerate image. Please try again."
SEARCH_FAILURE_MESSAGE = "Search failed. Please try again."
PDF_FAILURE_MESSAGE = "Failed to generate PDF."
IMAGE_FAILURE_MESSAGE = "Failed to generate image."

_UNSAFE_FILENAME = re.compile(r"[^\w\- ]+")


@dataclass(frozen=True)
class ExportResult:
    """
    Result of a successful export.

    Attributes:
        path: Written file
        size_bytes: File size
        duration_s: Synthesis plus write time
    """
    path: Path
    size_bytes: int
    duration_s: float


def export_filename(data: DocumentData, extension: str, timestamp_ms: int) -> str:
    """
    Download name for a document.

    Exams are named "<subject>-Exam-<ms>", everything else
    "worksheet-<ms>".

    Example:
        >>> export_filename(ExamData(subject="Biology"), "docx", 1700000000000)
        'Biology-Exam-1700000000000.docx'
    """
    if isinstance(data, ExamData):
        subject = _UNSAFE_FILENAME.sub("", data.subject).strip().replace(" ", "_")
        stem = f"{subject}-Exam-{timestamp_ms}" if subject else f"Exam-{timestamp_ms}"
    else:
        stem = f"worksheet-{timestamp_ms}"
    return f"{stem}.{extension}"


class StudioController:
    """
    One editing session.

    Generation calls run on the caller's thread; wrap them in your own
    executor to keep a UI responsive. Image regeneration always runs on
    the controller's worker pool and applies its result only if the
    session has not been reset or replaced since the request.

    Example:
        >>> with StudioController(generator) as studio:
        ...     studio.generate_worksheet("Plant cells, grade 7")
        ...     studio.export_document()
    """

    def __init__(
        self,
        generator: ContentGenerator,
        config: Optional[SynthesisConfig] = None,
        *,
        branding: Optional[BrandingOptions] = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        self._generator = generator
        self._config = config or SynthesisConfig()
        self._branding = branding or BrandingOptions()
        self._wall_clock = wall_clock

        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=self._config.max_workers)
        self._futures: List[Future] = []
        self._tracker = RegenerationTracker(self._config.regeneration_timeout_s, clock)

        self._epoch = 0
        self._document: Optional[DocumentData] = None
        self._reference: Optional[ReferenceImage] = None
        self._provider: Optional[SourceImageProvider] = None
        self._error: Optional[str] = None

    # ─────────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def document(self) -> Optional[DocumentData]:
        """Current snapshot (worksheet, image worksheet or exam)."""
        return self._document

    @property
    def reference(self) -> Optional[ReferenceImage]:
        return self._reference

    @property
    def branding(self) -> BrandingOptions:
        return self._branding

    @branding.setter
    def branding(self, value: Optional[BrandingOptions]) -> None:
        self._branding = value or BrandingOptions()

    @property
    def error(self) -> Optional[str]:
        """Banner text of the last failure, or None."""
        return self._error

    @property
    def regeneration(self) -> RegenerationTracker:
        return self._tracker

    @property
    def outstanding_requests(self) -> int:
        """Submitted regenerations that have not finished yet."""
        with self._lock:
            return len(self._futures)

    def dismiss_error(self) -> None:
        self._error = None

    def reset(self) -> None:
        """
        Clear the session.

        Outstanding regenerations keep running but their results are
        discarded.
        """
        with self._lock:
            self._epoch += 1
            self._document = None
            self._reference = None
            self._error = None
            self._close_provider_locked()
        self._tracker.clear()
        logger.info("Session reset")

    # ─────────────────────────────────────────────────────────────────────────
    # Reference image
    # ─────────────────────────────────────────────────────────────────────────

    def load_reference_file(self, path: Union[str, Path]) -> Optional[ReferenceImage]:
        """Use a local image file as the reference."""
        try:
            reference = load_image_file(Path(path))
        except StudioError as e:
            self._fail(e)
            return None
        self._set_reference(reference)
        return reference

    def load_reference_url(self, url: str) -> Optional[ReferenceImage]:
        """Download an image and use it as the reference."""
        try:
            reference = fetch_image(url, timeout=self._config.fetch_timeout_s)
        except StudioError as e:
            self._fail(e)
            return None
        self._set_reference(reference)
        return reference

    def set_reference(self, reference: Optional[ReferenceImage]) -> None:
        """Replace (or with None, clear) the reference image."""
        self._set_reference(reference)

    def _set_reference(self, reference: Optional[ReferenceImage]) -> None:
        with self._lock:
            self._close_provider_locked()
            self._reference = reference
            if reference is not None:
                self._provider = SourceImageProvider(reference.data)
        if reference is not None:
            logger.info(f"Reference image set ({reference.mime_type}, {len(reference.data)} bytes)")

    def _close_provider_locked(self) -> None:
        if self._provider is not None:
            self._provider.close()
            self._provider = None

    # ─────────────────────────────────────────────────────────────────────────
    # Generation
    # ─────────────────────────────────────────────────────────────────────────

    def generate_worksheet(self, prompt: str) -> Optional[WorksheetData]:
        """
        Generate a structured worksheet from instructions and the reference.

        Returns:
            The new snapshot, or None on failure (see `error`)
        """
        epoch = self._begin()
        start = time.perf_counter()
        try:
            raw = self._generator.generate_worksheet(prompt, self._reference)
            worksheet = parse_worksheet(raw)
        except StudioError as e:
            self._fail(e, epoch)
            return None
        except Exception as e:
            logger.exception("Worksheet generation failed")
            self._fail(GenerationFailure(str(e), user_message=WORKSHEET_FAILURE_MESSAGE), epoch)
            return None

        if not self._commit(worksheet, epoch):
            return None
        logger.info(
            f"Generated worksheet '{worksheet.title}' with {len(worksheet.sections)} sections "
            f"in {time.perf_counter() - start:.2f}s"
        )
        return worksheet

    def generate_visual_worksheet(self, prompt: str) -> Optional[GeneratedWorksheetImage]:
        """
        Generate a full-page worksheet image.

        Needs instructions or a reference image.
        """
        if not prompt.strip() and self._reference is None:
            self._error = MISSING_INPUT_MESSAGE
            return None

        epoch = self._begin()
        try:
            url = _as_data_url(self._generator.generate_worksheet_image(prompt, self._reference))
            if not is_remote_url(url):
                decode_image(url)
        except ImageDecodeFailure as e:
            self._fail(GenerationFailure(str(e), user_message=VISUAL_FAILURE_MESSAGE), epoch)
            return None
        except StudioError as e:
            self._fail(e, epoch)
            return None
        except Exception as e:
            logger.exception("Worksheet image generation failed")
            self._fail(GenerationFailure(str(e), user_message=VISUAL_FAILURE_MESSAGE), epoch)
            return None

        generated = GeneratedWorksheetImage(image_url=url, prompt=prompt)
        if not self._commit(generated, epoch):
            return None
        logger.info("Generated worksheet image")
        return generated

    def generate_exam(self, image: Optional[ReferenceImage] = None) -> Optional[ExamData]:
        """
        Transcribe a photographed exam paper.

        Args:
            image: Exam photo; defaults to the current reference image
        """
        image = image or self._reference
        if image is None:
            self._error = MISSING_EXAM_IMAGE_MESSAGE
            return None

        epoch = self._begin()
        try:
            exam = parse_exam(self._generator.generate_exam(image))
        except Exception as e:
            logger.warning(f"Exam transcription failed: {e}")
            self._fail(GenerationFailure(str(e), user_message=EXAM_FAILURE_MESSAGE), epoch)
            return None

        if not self._commit(exam, epoch):
            return None
        logger.info(f"Transcribed exam with {len(exam.questions)} questions, {exam.total_marks} marks")
        return exam

    def search_worksheets(self, query: str) -> Tuple[SearchResult, ...]:
        """
        Find web resources to use as inspiration.

        Results are links only; an image found through one is brought in
        with load_reference_url(). The current snapshot is not touched.
        """
        if not query.strip():
            return ()

        self.dismiss_error()
        try:
            results = parse_search_results(self._generator.search_worksheets(query.strip()))
        except Exception as e:
            logger.warning(f"Worksheet search failed: {e}")
            self._fail(GenerationFailure(str(e), user_message=SEARCH_FAILURE_MESSAGE))
            return ()

        logger.info(f"Search '{query.strip()}' returned {len(results)} results")
        return results

    def open_document(self, document: DocumentData) -> None:
        """Install an already validated snapshot, e.g. a saved response."""
        self._commit(document, self._begin())
        logger.info(f"Opened {type(document).__name__}")

    def _begin(self) -> int:
        """Start an operation: clear the banner and capture the epoch."""
        with self._lock:
            self._error = None
            return self._epoch

    def _commit(self, document: DocumentData, epoch: int) -> bool:
        """Install a new snapshot unless the session moved on."""
        with self._lock:
            if epoch != self._epoch:
                logger.debug("Discarding result for a reset session")
                return False
            self._epoch += 1
            self._document = document
        self._tracker.clear()
        return True

    def _fail(self, error: StudioError, epoch: Optional[int] = None) -> None:
        with self._lock:
            if epoch is not None and epoch != self._epoch:
                return
            self._error = error.banner_text()
        logger.warning(f"{type(error).__name__}: {error}")

    # ─────────────────────────────────────────────────────────────────────────
    # Image regeneration
    # ─────────────────────────────────────────────────────────────────────────

    def request_regeneration(self, section_id: str, prompt: Optional[str] = None) -> Optional[Future]:
        """
        Regenerate one section's illustration in the background.

        Args:
            section_id: Section to update
            prompt: Image prompt; defaults to the section's own prompt

        Returns:
            Future resolving to the updated WorksheetData (None if the
            result was discarded), or None when no request was started
        """
        with self._lock:
            document = self._document
            epoch = self._epoch
        if not isinstance(document, WorksheetData):
            return None
        section = document.find_section(section_id)
        if section is None:
            logger.debug(f"Regeneration requested for unknown section {section_id}")
            return None

        prompt = prompt or section.image_prompt or section.title or document.title
        if not self._tracker.start(section_id):
            logger.debug(f"Regeneration already pending for {section_id}")
            return None

        future = self._executor.submit(self._regenerate, section_id, prompt, epoch)
        with self._lock:
            self._futures.append(future)
        future.add_done_callback(self._forget_future)
        return future

    def _forget_future(self, future: Future) -> None:
        with self._lock:
            if future in self._futures:
                self._futures.remove(future)

    def _regenerate(self, section_id: str, prompt: str, epoch: int) -> Optional[WorksheetData]:
        try:
            url = _as_data_url(self._generator.generate_section_image(prompt))
        except Exception as e:
            logger.warning(f"Image regeneration for {section_id} failed: {e}")
            with self._lock:
                current = epoch == self._epoch
            if current:
                self._tracker.complete(section_id)
                self._fail(GenerationFailure(str(e), user_message=REGENERATION_FAILURE_MESSAGE), epoch)
            return None

        with self._lock:
            document = self._document
            if epoch != self._epoch or not isinstance(document, WorksheetData):
                logger.debug(f"Ignoring stale regeneration for {section_id}")
                return None
            if document.find_section(section_id) is None:
                logger.debug(f"Section {section_id} no longer exists")
                return None
            updated = document.with_section_image(section_id, url)
            self._document = updated
        self._tracker.complete(section_id)
        logger.info(f"Regenerated image for section {section_id}")
        return updated

    def _on_regenerate(self, section_id: str, prompt: str) -> Optional[Future]:
        return self.request_regeneration(section_id, prompt)

    def wait_all(self) -> None:
        """Block until every submitted regeneration has finished."""
        with self._lock:
            futures = list(self._futures)
        for future in futures:
            future.result()

    # ─────────────────────────────────────────────────────────────────────────
    # View and export
    # ─────────────────────────────────────────────────────────────────────────

    def view(self) -> Optional[DocumentView]:
        """Synthesize the on-screen view of the current snapshot."""
        document = self._document
        if document is None:
            return None
        return synthesize_view(
            document,
            self._branding,
            config=self._config.layout,
            images=self._provider,
            regeneration=self._tracker,
            on_regenerate=self._on_regenerate,
            url_loader=self._load_url,
        )

    def _load_url(self, url: str) -> bytes:
        return fetch_image(url, timeout=self._config.fetch_timeout_s).data

    def export_document(self, output_dir: Optional[Path] = None) -> Optional[ExportResult]:
        """Export the current snapshot as a Word document."""
        return self._export(
            "docx",
            lambda document: synthesize_document(document, self._branding, images=self._provider),
            output_dir,
            None,
        )

    def export_pdf(self, output_dir: Optional[Path] = None) -> Optional[ExportResult]:
        """Export the print rendering of the current snapshot as PDF."""
        return self._export(
            "pdf",
            lambda document: render_to_pdf(self._view_of(document), target=RenderTarget.PRINT),
            output_dir,
            PDF_FAILURE_MESSAGE,
        )

    def export_image(self, output_dir: Optional[Path] = None) -> Optional[ExportResult]:
        """
        Export a PNG.

        Image worksheets are saved as generated; other documents are
        rendered page by page and stacked.
        """
        return self._export("png", self._png_bytes, output_dir, IMAGE_FAILURE_MESSAGE)

    def _png_bytes(self, document: DocumentData) -> bytes:
        if isinstance(document, GeneratedWorksheetImage):
            source = document.image_url
            image = decode_image(self._load_url(source) if is_remote_url(source) else source)
            buf = io.BytesIO()
            image.save(buf, format="PNG")
            return buf.getvalue()
        return render_to_png(self._view_of(document), page=None, target=RenderTarget.PRINT)

    def _view_of(self, document: DocumentData) -> DocumentView:
        return synthesize_view(
            document,
            self._branding,
            config=self._config.layout,
            images=self._provider,
            url_loader=self._load_url,
        )

    def _export(
        self,
        extension: str,
        synthesize: Callable[[DocumentData], bytes],
        output_dir: Optional[Path],
        failure_message: Optional[str],
    ) -> Optional[ExportResult]:
        document = self._document
        if document is None:
            logger.debug(f"Nothing to export as {extension}")
            return None

        start = time.perf_counter()
        directory = output_dir or self._config.resolved_output_dir
        path = directory / export_filename(document, extension, int(self._wall_clock() * 1000))
        try:
            data = synthesize(document)
            _write_atomic(path, data)
        except ExportFailure as e:
            self._fail(e)
            return None
        except Exception as e:
            logger.exception(f"{extension} export failed")
            error = ExportFailure(str(e))
            if failure_message is not None:
                error = ExportFailure(str(e), user_message=failure_message)
            self._fail(error)
            return None

        result = ExportResult(path=path, size_bytes=len(data), duration_s=time.perf_counter() - start)
        logger.info(f"Exported {path} ({result.size_bytes} bytes) in {result.duration_s:.2f}s")
        return result

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker pool and release the reference image."""
        self._executor.shutdown(wait=wait)
        with self._lock:
            self._close_provider_locked()

    def __enter__(self) -> "StudioController":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown(wait=True)


def _as_data_url(value: str) -> str:
    """Normalize generator image output (bare base64) to a data URL."""
    value = value.strip()
    if value.startswith("data:") or is_remote_url(value):
        return value
    return f"data:image/png;base64,{value}"


def _write_atomic(path: Path, data: bytes) -> None:
    """Write through a temp file in the target directory, then rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
