"""Resolution of the override labels applied to one proxied request."""
import fnmatch
import logging
import os
from typing import Iterable, List, Tuple

from label_exporter.errors import OverrideSourceUnreadable
from label_exporter.labels import LabelMap

logger = logging.getLogger(__name__)

LABEL_SUFFIX = ".label"
LABEL_GLOB = "*" + LABEL_SUFFIX


def query_to_labels(items: Iterable[Tuple[str, str]]) -> LabelMap:
    """Convert query parameters to labels; the first value of a key wins."""
    labels: LabelMap = {}
    for key, value in items:
        labels.setdefault(key, value)
    return labels


def _listing_error(path: str, error: OSError) -> OverrideSourceUnreadable:
    return OverrideSourceUnreadable(f"Unable to list {path}: {error}", "list-labels-dir")


def list_label_files(labels_dir: str, recursive: bool = False) -> Tuple[List[str], List[OverrideSourceUnreadable]]:
    """
    List override files under a directory, in sorted order.

    Listing failures are returned rather than raised so that a walk which
    trips over one subdirectory still yields the files it did find.

    Returns:
        Tuple of (file paths, listing errors)
    """
    errors: List[OverrideSourceUnreadable] = []

    if not recursive:
        try:
            with os.scandir(labels_dir) as entries:
                names = [e.name for e in entries if fnmatch.fnmatchcase(e.name, LABEL_GLOB)]
        except OSError as e:
            return [], [_listing_error(labels_dir, e)]
        return sorted(os.path.join(labels_dir, name) for name in names), errors

    def on_error(e: OSError):
        errors.append(_listing_error(e.filename or labels_dir, e))

    paths = []
    for root, _dirs, files in os.walk(labels_dir, onerror=on_error):
        paths.extend(os.path.join(root, name) for name in files if fnmatch.fnmatchcase(name, LABEL_GLOB))
    return sorted(paths), errors


def read_label_file(path: str) -> Tuple[str, str]:
    """Read one override file, returning (label name, label value)."""
    name = os.path.basename(path)[:-len(LABEL_SUFFIX)]
    try:
        with open(path, "r", encoding="utf-8", errors="surrogateescape") as f:
            value = f.read()
    except OSError as e:
        raise OverrideSourceUnreadable(f"Unable to read {path}: {e}", "read-label-file") from e
    return name, value.strip("\r\n")


def _report(error: OverrideSourceUnreadable, metrics):
    logger.error(str(error))
    if metrics is not None:
        metrics.record_error(error.kind)


def load_file_overrides(labels_dir: str, recursive: bool = False, metrics=None) -> LabelMap:
    """Load every readable override file; failures are logged and counted."""
    overrides: LabelMap = {}

    paths, errors = list_label_files(labels_dir, recursive=recursive)
    for error in errors:
        _report(error, metrics)

    if not paths:
        logger.info(f"No label files found in {labels_dir}")

    for path in paths:
        try:
            name, value = read_label_file(path)
        except OverrideSourceUnreadable as e:
            _report(e, metrics)
            continue
        logger.debug(f"Loaded override {name} from {path}")
        overrides[name] = value

    return overrides


def resolve_overrides(
    labels_dir: str,
    query_params: Iterable[Tuple[str, str]] = (),
    metrics=None,
    recursive: bool = False
) -> LabelMap:
    """
    Compute the override labels for one request.

    Query parameters form the base set; labels read from ``*.label`` files
    in ``labels_dir`` are laid on top and win on collision. Files are read
    on every call.

    Args:
        labels_dir: Directory holding ``<name>.label`` files
        query_params: (key, value) pairs from the request query string
        metrics: Optional ProxyMetrics for error counting
        recursive: Walk subdirectories instead of only the top level

    Returns:
        The effective override labels
    """
    overrides = query_to_labels(query_params)
    overrides.update(load_file_overrides(labels_dir, recursive=recursive, metrics=metrics))
    return overrides
