import asyncio
from typing import Callable

from common.errors import ComicWorkflowError, StorageError
from common.models import ComicIllustration, PDFSummary, ReferenceImage
from common.utils import logger
from comic.collaborators import (
    BaseDocumentSummarizer,
    BaseObjectStore,
    BaseRecordStore,
)
from folder_monitor.base_folder_monitor import BaseFolderMonitor

ComicGeneratedCallback = Callable[[ComicIllustration], None]


class ComicService:
    """Upload a PDF and a reference image, then wait for the generated comic.

    Comic generation itself happens elsewhere; this service only creates the
    illustration record and fills in its URL once a fresh folder monitor
    reports the output file.
    """

    def __init__(
        self,
        summarizer: BaseDocumentSummarizer,
        object_store: BaseObjectStore,
        monitor_factory: Callable[[], BaseFolderMonitor],
        record_store: BaseRecordStore | None = None,
    ) -> None:
        self.summarizer = summarizer
        self.object_store = object_store
        self.monitor_factory = monitor_factory
        self.record_store = record_store
        self.is_generating = False
        self._monitor: BaseFolderMonitor | None = None

    def upload_pdf(self, file_name: str, data: bytes) -> PDFSummary:
        try:
            document = self.summarizer.summarize(file_name, data)
        except Exception as e:
            logger.error(f"Error processing PDF {file_name}: {e}")
            raise ComicWorkflowError("Failed to process PDF file") from e

        pdf_summary = PDFSummary(
            file_name=file_name,
            summary=document.summary,
            key_takeaways=document.key_points,
        )
        logger.info(f"PDF uploaded and summarized: {pdf_summary.id} ({file_name})")
        return pdf_summary

    def upload_image(
        self, file_name: str, data: bytes, content_type: str = "image/png"
    ) -> ReferenceImage:
        try:
            url = self.object_store.put(f"reference/{file_name}", data, content_type)
        except Exception as e:
            logger.error(f"Error uploading image {file_name}: {e}")
            raise ComicWorkflowError("Failed to upload image") from e

        reference_image = ReferenceImage(file_name=file_name, url=url)
        logger.info(f"Image uploaded: {reference_image.id} ({file_name})")
        return reference_image

    def can_generate(
        self, pdf_summary: PDFSummary | None, reference_image: ReferenceImage | None
    ) -> bool:
        return pdf_summary is not None and reference_image is not None and not self.is_generating

    def generate_comic(
        self,
        pdf_summary: PDFSummary,
        reference_image: ReferenceImage,
        on_generated: ComicGeneratedCallback,
    ) -> ComicIllustration:
        """Start waiting for the generated comic and return its (URL-less) record.

        ``on_generated`` receives a copy of the record with ``url`` filled in.
        Must be called while an asyncio event loop is running.
        """
        comic = ComicIllustration(summary_id=pdf_summary.id, image_id=reference_image.id)
        logger.info(f"Comic generation initiated: {comic.id}")

        if self._monitor is not None:
            self._monitor.stop_monitoring()
        monitor = self.monitor_factory()
        self._monitor = monitor
        self.is_generating = True

        def handle_image_found(image_url: str) -> None:
            self.is_generating = False
            updated = comic.model_copy(update={"url": image_url})
            self._store(updated)
            on_generated(updated)

        monitor.start_monitoring(handle_image_found)
        return comic

    async def generate_comic_and_wait(
        self, pdf_summary: PDFSummary, reference_image: ReferenceImage
    ) -> ComicIllustration:
        future: asyncio.Future[ComicIllustration] = asyncio.get_running_loop().create_future()

        def resolve(comic: ComicIllustration) -> None:
            if not future.done():
                future.set_result(comic)

        self.generate_comic(pdf_summary, reference_image, resolve)
        return await future

    def cancel(self) -> None:
        if self._monitor is not None:
            self._monitor.stop_monitoring()
        self.is_generating = False

    def _store(self, comic: ComicIllustration) -> None:
        if self.record_store is None:
            return
        try:
            self.record_store.insert("comic_illustrations", comic.model_dump(by_alias=True))
        except StorageError as e:
            logger.error(f"Failed to store comic illustration {comic.id}: {e}")
