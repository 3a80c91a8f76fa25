"""
PanSpine v0.1.0

I/O module for PanSpine.

1. payload_loader.py - JSON graph payload loading (plain or gzip)
2. report_export.py - Feature Report JSON, feature and walk TSV export
"""

from .payload_loader import load_graph, load_payload, open_file
from .report_export import export_features_tsv, export_report_json, export_walks_tsv

__all__ = [
    'load_payload',
    'load_graph',
    'open_file',
    'export_report_json',
    'export_features_tsv',
    'export_walks_tsv',
]
