# checkout_recs/core/logging.py
import logging
import sys
import colorlog

DIAGNOSTIC_FORMAT = "%(log_color)s%(asctime)s %(levelname)-8s [%(name)s]%(reset)s %(message)s"


class DiagnosticFormatter(colorlog.ColoredFormatter):
    """
    Appends structured diagnostic fields (passed through `extra=`) to the formatted
    line, so operators can grep `event=recommendations.fetch_failed` in plain log output.
    The record itself is left untouched for other handlers.
    """

    FIELDS = ("event", "error_kind", "trigger_product_id", "generation", "variant_id")

    def formatMessage(self, record: logging.LogRecord) -> str:
        message = super().formatMessage(record)
        if not getattr(record, "event", None):
            return message
        pairs = [f"{k}={getattr(record, k)}" for k in self.FIELDS if getattr(record, k, None) is not None]
        return f"{message} | " + " ".join(pairs)


def configure_logging(level=logging.INFO):
    handler = colorlog.StreamHandler(sys.stdout)
    handler.setFormatter(
        DiagnosticFormatter(
            DIAGNOSTIC_FORMAT,
            datefmt="%H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    # Silence overly chatty libs if needed
    logging.getLogger("uvicorn.error").setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(level)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
