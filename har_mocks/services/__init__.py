"""Service layer for the capture-based mock pipeline."""

from har_mocks.services.extractor import extract_operations, extract_responses_by_operation
from har_mocks.services.fingerprint import fingerprint
from har_mocks.services.generator import MockGeneratorService
from har_mocks.services.merger import ArchiveMergeService, merge_archives
from har_mocks.services.registry import MockRegistry, RegistryBuilder, load_registry
from har_mocks.services.resolver import MockResolver
from har_mocks.services.shape_check import ShapeCheckService, compare_shapes
from har_mocks.services.validator import DriftValidator, summarize

__all__ = [
    'ArchiveMergeService',
    'DriftValidator',
    'MockGeneratorService',
    'MockRegistry',
    'MockResolver',
    'RegistryBuilder',
    'ShapeCheckService',
    'compare_shapes',
    'extract_operations',
    'extract_responses_by_operation',
    'fingerprint',
    'load_registry',
    'merge_archives',
    'summarize',
]
