#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PanSpine v0.1.0

Report Export — Feature Report JSON, feature summary TSV and walk path TSV.

Author: PanSpine Development Team
License: MIT License - See LICENSE
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Union

from ..graph_core.report import FeatureReport
from ..graph_core.walk_extractor import Walk

logger = logging.getLogger(__name__)

FEATURE_TSV_COLUMNS = (
    'id', 'type', 'left_id', 'right_id', 'orientation', 'span_start', 'span_end',
    'ref_len_bp', 'n_paths', 'min_alt_len_bp', 'max_alt_len_bp', 'region_nodes',
    'truncated', 'parent_id', 'children', 'overlap_group',
)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def export_report_json(report: FeatureReport, output_path: Union[str, Path], indent: int = 2) -> Dict[str, Any]:
    """
    Write a Feature Report as JSON.

    Returns:
        The serialized dict that was written
    """
    output_path = Path(output_path)
    data = report.to_dict()
    with open(output_path, 'w') as f:
        json.dump(data, f, indent=indent or None)
    logger.info(f"Feature report ({len(report.events)} features) exported to {output_path}")
    return data


def export_features_tsv(report: FeatureReport, output_path: Union[str, Path]) -> None:
    """
    Write one row per feature.

    Format:
        id\ttype\tleft_id\tright_id\t...\toverlap_group
    """
    output_path = Path(output_path)
    with open(output_path, 'w') as f:
        f.write("# Spine features\n")
        f.write("\t".join(FEATURE_TSV_COLUMNS) + "\n")
        for event in report.events:
            row = (
                event.id,
                event.type.value,
                event.anchors.left_id,
                event.anchors.right_id,
                event.anchors.orientation.value,
                event.anchors.span_start,
                event.anchors.span_end,
                event.anchors.ref_len_bp,
                event.stats.n_paths,
                event.stats.min_alt_len_bp,
                event.stats.max_alt_len_bp,
                len(event.region.nodes),
                event.region.truncated,
                event.relations.parent_id,
                ",".join(event.relations.children_ids),
                event.relations.overlap_group,
            )
            f.write("\t".join(_cell(v) for v in row) + "\n")
    logger.info(f"Exported {len(report.events)} features to {output_path}")


def export_walks_tsv(walks: Iterable[Walk], output_path: Union[str, Path]) -> None:
    """
    Write one row per walk path.

    Format:
        assembly_key\tpath_index\tmode\tlength_bp\tpath
    """
    output_path = Path(output_path)
    n_rows = 0
    with open(output_path, 'w') as f:
        f.write("# Assembly walks\n")
        f.write("assembly_key\tpath_index\tmode\tlength_bp\tpath\n")
        for walk in walks:
            for i, path in enumerate(walk.paths):
                path_str = ",".join(str(n) for n in path.nodes)
                f.write(f"{walk.assembly_key}\t{i}\t{path.mode}\t{path.length_bp}\t{path_str}\n")
                n_rows += 1
    logger.info(f"Exported {n_rows} walk paths to {output_path}")

# PanSpine v0.1.0
# Any usage is subject to this software's license.
