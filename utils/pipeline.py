"""
The generation pipeline: encode, load, composite, assemble.

Stages run strictly in order and the first failure stops the run. Whatever
a stage raises reaches the caller as the PipelineError subclass for that
stage, so every stage failure gets the same response.
"""
from utils.compositor import composite
from utils.errors import (
    AssetError,
    EncodingError,
    GeometryError,
    PipelineError,
    RenderError,
    describe_error,
)
from utils.layout import QR_SIZE, caption_baseline, caption_font_size, overlay_position
from utils.pdf_assembler import assemble
from utils.qr_generator import encode_qr


def _run_stage(error_cls, message, func, *args, **kwargs):
    try:
        return func(*args, **kwargs)
    except PipelineError:
        raise
    except Exception as e:
        raise error_cls(message) from e


class QRPdfPipeline:

    def __init__(self, template_loader, logger):
        self.template_loader = template_loader
        self.logger = logger

    def run(self, url, request_id):
        """Produce the PDF for ``url``; returns a BytesIO positioned at 0."""
        log = self.logger
        try:
            log.debug("Generating QR code", requestId=request_id, url=url)
            qr_image = _run_stage(EncodingError, "Failed to generate QR code", encode_qr, url)
            log.debug("QR code generated successfully", requestId=request_id)

            log.debug("Loading template image", requestId=request_id)
            template = _run_stage(AssetError, "Template image could not be read", self.template_loader.load)
            log.debug(
                "Template dimensions obtained",
                requestId=request_id,
                width=template.width,
                height=template.height,
            )

            top, left = overlay_position(template.width, QR_SIZE)
            log.debug("QR code position calculated", requestId=request_id, position={"top": top, "left": left})

            log.debug("Compositing images", requestId=request_id)
            processed = _run_stage(
                GeometryError, "Failed to composite images",
                composite, template.image, qr_image, top=top, left=left,
            )
            log.debug("Image composition completed", requestId=request_id)

            log.debug(
                "Creating PDF document",
                requestId=request_id,
                fontSize=caption_font_size(template.width),
                textY=caption_baseline(template.height),
            )
            pdf = _run_stage(
                RenderError, "PDF generation failed",
                assemble, processed, template.width, template.height, url,
            )
            log.debug("PDF document assembled", requestId=request_id)
            return pdf
        except AssetError as e:
            # The asset ships with the service; losing it is a deployment fault
            log.error(
                "Template asset unusable",
                requestId=request_id,
                templatePath=self.template_loader.path,
                error=describe_error(e.__cause__ or e),
            )
            raise
        except PipelineError as e:
            log.error(
                "Error during PDF generation",
                requestId=request_id,
                stage=e.stage,
                error=describe_error(e.__cause__ or e),
            )
            raise
