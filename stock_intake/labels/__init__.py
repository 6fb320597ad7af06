"""Label printing: payload builders, printer protocol, file-backed mock printer."""

from stock_intake.labels.builder import group_label, record_label, whole_box_labels
from stock_intake.labels.file_printer import FileLabelPrinter
from stock_intake.labels.protocol import LabelPrinter

__all__ = [
    "LabelPrinter",
    "FileLabelPrinter",
    "record_label",
    "whole_box_labels",
    "group_label",
]
