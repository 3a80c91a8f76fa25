"""
PanSpine Pangenome Service.

Stateful facade over the graph core used by the CLI and by embedding
applications:
- Load a payload (dict or file) into an immutable graph
- List assembly keys and extract per-assembly walks
- Build a spine from an assembly walk and assess its features
- Answer bp coordinate lookups against the most recent report

Every analysis call requires a loaded graph and raises MissingGraph otherwise.
"""

import copy
from pathlib import Path
from typing import Optional, Dict, Any, List, Union
import logging

from ..config.schema import DEFAULT_CONFIG, _deep_merge
from ..graph_core.errors import MissingGraph, PanSpineError
from ..graph_core.feature_classifier import FeatureOptions, assess_graph_features
from ..graph_core.graph_builder import PangenomeGraph, build_graph_from_payload
from ..graph_core.report import (
    FeatureReport, any_bp_extent, bp_extent_on_spine, projected_bp_in_feature,
)
from ..graph_core.signed_id import SignedLike
from ..graph_core.spine import Spine, build_spine
from ..graph_core.walk_extractor import Walk, create_assembly_walk, create_assembly_walks
from ..io_utils.payload_loader import load_payload

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = 'INFO', log_file: Optional[Union[str, Path]] = None):
    """Configure root logging the same way for the CLI and the service."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )


# ============================================================================
# Pangenome Service
# ============================================================================

class PangenomeService:
    """
    Load a pangenome graph once, then answer walk and feature requests.

    Args:
        config: Configuration dict (merged over DEFAULT_CONFIG)
        configure_logging: Call logging.basicConfig from the output.logging section
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, configure_logging: bool = False):
        self.config = _deep_merge(copy.deepcopy(DEFAULT_CONFIG), config or {})

        if configure_logging:
            log_config = self.config['output']['logging']
            setup_logging(log_config.get('level', 'INFO'), log_config.get('log_file'))
        self.logger = logging.getLogger(__name__)

        self._graph: Optional[PangenomeGraph] = None
        self.report: Optional[FeatureReport] = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @property
    def graph(self) -> PangenomeGraph:
        return self._require_graph("graph access")

    @property
    def is_loaded(self) -> bool:
        return self._graph is not None

    def _require_graph(self, operation: str) -> PangenomeGraph:
        if self._graph is None:
            raise MissingGraph(operation)
        return self._graph

    def load_data(self, payload: Dict[str, Any]) -> PangenomeGraph:
        """Build the graph from a payload dict; replaces any previous graph."""
        delim = self.config['graph']['assembly_key_delim']
        self._graph = build_graph_from_payload(payload, assembly_key_delim=delim)
        self.report = None
        return self._graph

    def load_file(self, filepath: Union[str, Path]) -> PangenomeGraph:
        """Load a payload JSON file and build the graph."""
        return self.load_data(load_payload(filepath))

    # ------------------------------------------------------------------
    # Walks
    # ------------------------------------------------------------------

    def list_assembly_keys(self) -> List[str]:
        return self._require_graph("listing assembly keys").assembly_keys()

    def _walk_kwargs(self, overrides: Dict[str, Any]) -> Dict[str, Any]:
        walk_config = dict(self.config['walk'])
        walk_config.update({k: v for k, v in overrides.items() if v is not None})
        return {
            'mode': walk_config['mode'],
            'direction': walk_config['direction'],
            'start_node': walk_config.get('start_node'),
        }

    def get_assembly_walk(self, assembly_key: str, **overrides) -> Walk:
        """
        Walk for one assembly key.

        Keyword overrides: mode, direction, start_node (default from config 'walk').
        """
        graph = self._require_graph("walk extraction")
        return create_assembly_walk(graph, assembly_key, **self._walk_kwargs(overrides))

    def get_all_assembly_walks(self, **overrides) -> Dict[str, Walk]:
        graph = self._require_graph("walk extraction")
        return create_assembly_walks(graph, **self._walk_kwargs(overrides))

    # ------------------------------------------------------------------
    # Features
    # ------------------------------------------------------------------

    def feature_options(self, **overrides) -> FeatureOptions:
        values = dict(self.config['features'])
        values.update({k: v for k, v in overrides.items() if v is not None})
        return FeatureOptions.from_dict(values)

    def get_spine(self, assembly_key: str, locus_start_bp: Optional[int] = None, **walk_overrides) -> Spine:
        """Spine from the primary path of an assembly walk."""
        graph = self._require_graph("spine construction")
        walk = self.get_assembly_walk(assembly_key, **walk_overrides)
        start = self.config['features']['locus_start_bp'] if locus_start_bp is None else locus_start_bp
        return build_spine(graph, walk, locus_start_bp=start)

    def get_spine_features(self, assembly_key: str, **option_overrides) -> FeatureReport:
        """
        Feature Report for the spine of one assembly.

        Keyword overrides are FeatureOptions fields (e.g. max_paths_per_event).
        The report becomes the active one for the coordinate lookups.
        """
        graph = self._require_graph("feature analysis")
        options = self.feature_options(**option_overrides)
        spine = self.get_spine(assembly_key, locus_start_bp=options.locus_start_bp)
        if not spine.nodes:
            self.logger.warning(f"Assembly '{assembly_key}' produced an empty spine; no features")
        self.report = assess_graph_features(graph, spine, options)
        return self.report

    # ------------------------------------------------------------------
    # Coordinate lookups
    # ------------------------------------------------------------------

    def _require_report(self, operation: str) -> FeatureReport:
        self._require_graph(operation)
        if self.report is None:
            raise PanSpineError(f"No feature report: call get_spine_features() before {operation}")
        return self.report

    def bp_extent_on_spine(self, node_id: SignedLike) -> Optional[Dict[str, Any]]:
        return bp_extent_on_spine(self._require_report("spine lookup").spine, node_id)

    def projected_bp_in_feature(self, node_id: SignedLike, feature_id: str) -> Optional[Dict[str, Any]]:
        feature = self._require_report("feature lookup").feature(feature_id)
        if feature is None:
            return None
        return projected_bp_in_feature(node_id, feature)

    def any_bp_extent(self, node_id: SignedLike) -> Optional[Dict[str, Any]]:
        return any_bp_extent(node_id, self._require_report("coordinate lookup"))
